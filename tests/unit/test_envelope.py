"""
응답 봉투 정규화 단위 테스트
"""

import unittest

from app.core.envelope import (
    Empty,
    Many,
    Single,
    decode_items,
    first_item,
    normalize,
    page_meta,
)
from tests.fakes import envelope


class TestNormalize(unittest.TestCase):
    """item 정규화 테스트"""

    def test_array_items(self):
        """배열은 순서 그대로"""
        data = envelope([{"contentid": "2"}, {"contentid": "1"}, {"contentid": "2"}])

        self.assertIsInstance(decode_items(data), Many)
        self.assertEqual(
            [item["contentid"] for item in normalize(data)], ["2", "1", "2"]
        )

    def test_single_object(self):
        """단건 객체는 길이 1 리스트"""
        data = envelope({"contentid": "126508"})

        self.assertIsInstance(decode_items(data), Single)
        self.assertEqual(normalize(data), [{"contentid": "126508"}])
        self.assertEqual(first_item(data), {"contentid": "126508"})

    def test_empty_string_items(self):
        """결과 없음 (items 가 빈 문자열)"""
        data = envelope(None)

        self.assertIsInstance(decode_items(data), Empty)
        self.assertEqual(normalize(data), [])
        self.assertIsNone(first_item(data))

    def test_missing_levels(self):
        """body, items, item 누락"""
        self.assertEqual(normalize({}), [])
        self.assertEqual(normalize({"response": {}}), [])
        self.assertEqual(normalize({"response": {"body": {}}}), [])
        self.assertEqual(normalize({"response": {"body": {"items": {}}}}), [])
        self.assertEqual(normalize(None), [])

    def test_page_meta(self):
        """페이지 메타데이터 (숫자 문자열 허용)"""
        data = envelope([{"contentid": "1"}], total_count=123, page_no=2, num_of_rows=20)
        data["response"]["body"]["totalCount"] = "123"

        meta = page_meta(data)

        self.assertEqual(meta.total_count, 123)
        self.assertEqual(meta.page_no, 2)
        self.assertEqual(meta.num_of_rows, 20)

    def test_page_meta_missing_body(self):
        self.assertEqual(page_meta({}).total_count, 0)


if __name__ == "__main__":
    unittest.main()
