"""
쿼리 문자열 조립 단위 테스트
"""

import unittest
from urllib.parse import parse_qsl

from app.core.query_builder import build_query, filter_params, is_absent


class TestQueryBuilder(unittest.TestCase):
    """쿼리 빌더 테스트"""

    def test_absent_values_are_dropped(self):
        """None, 빈 문자열은 제외"""
        query = build_query({"a": "1", "b": None, "c": "", "d": 0})

        self.assertEqual(query, "a=1&d=0")

    def test_insertion_order_is_kept(self):
        """입력 순서 유지"""
        query = build_query({"numOfRows": 20, "pageNo": 1, "areaCode": "1"})

        self.assertEqual(query, "numOfRows=20&pageNo=1&areaCode=1")

    def test_values_are_url_encoded(self):
        """한글, 공백, 예약 문자 인코딩"""
        query = build_query({"keyword": "경복궁 야간&개장"})

        self.assertNotIn(" ", query)
        self.assertEqual(parse_qsl(query), [("keyword", "경복궁 야간&개장")])

    def test_filter_params_converts_to_str(self):
        """숫자는 str() 그대로"""
        self.assertEqual(filter_params({"n": 3, "f": 1.5, "s": None}), {"n": "3", "f": "1.5"})

    def test_is_absent(self):
        self.assertTrue(is_absent(None))
        self.assertTrue(is_absent(""))
        self.assertFalse(is_absent(0))
        self.assertFalse(is_absent("0"))


if __name__ == "__main__":
    unittest.main()
