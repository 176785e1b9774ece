import unittest
from datetime import date, datetime

from clinical_utils import (
    TARGET_RANGE_COLUMN,
    TROUGH_C0_COLUMN,
    age_from_dob,
    bmi,
    dosage_link,
    fmt_dmy,
    get_param,
    in_age_group,
    in_target_for_row,
    in_therapeutic_range_c0,
    parse_dmy,
    parse_range,
)


class DateHelpersTests(unittest.TestCase):
    def test_parse_dmy_reads_day_month_year(self) -> None:
        self.assertEqual(parse_dmy("12/05/1980"), date(1980, 5, 12))
        self.assertEqual(parse_dmy(" 7/ 3/2020"), date(2020, 3, 7))

    def test_parse_dmy_rejects_malformed_text(self) -> None:
        for text in ("31/13/2020", "abc", "", None, "12/05", "12/05/2020/1", "aa/05/2020", 12052020):
            with self.subTest(text=text):
                self.assertIsNone(parse_dmy(text))

    def test_parse_dmy_rejects_zero_components(self) -> None:
        self.assertIsNone(parse_dmy("0/05/2020"))
        self.assertIsNone(parse_dmy("12/0/2020"))
        self.assertIsNone(parse_dmy("12/05/0"))
        self.assertIsNone(parse_dmy("/05/2020"))

    def test_parse_dmy_rolls_day_overflow_forward(self) -> None:
        self.assertEqual(parse_dmy("31/02/2021"), date(2021, 3, 3))
        self.assertEqual(parse_dmy("32/12/2020"), date(2021, 1, 1))

    def test_parse_dmy_truncates_and_bounds_components(self) -> None:
        cases = {
            "1.5/02/2020": date(2020, 2, 1),
            "10/2.9/2020": date(2020, 2, 10),
            "01/01/10000": None,
            "01/01/-5": None,
        }
        for text, expected in cases.items():
            with self.subTest(text=text):
                self.assertEqual(parse_dmy(text), expected)

    def test_format_round_trips_valid_dates(self) -> None:
        for text in ("01/01/2000", "29/02/2024", "31/12/1999", "05/11/1981", "01/01/0999"):
            with self.subTest(text=text):
                self.assertEqual(fmt_dmy(parse_dmy(text)), text)
        self.assertEqual(fmt_dmy(parse_dmy("1/2/2020")), "01/02/2020")

    def test_fmt_dmy_placeholder_for_non_dates(self) -> None:
        self.assertEqual(fmt_dmy(None), "-")
        self.assertEqual(fmt_dmy("2020-01-01"), "-")
        self.assertEqual(fmt_dmy(datetime(2020, 3, 4, 10, 30)), "04/03/2020")

    def test_age_counts_whole_years(self) -> None:
        self.assertEqual(age_from_dob("12/05/1980", today=date(2024, 5, 11)), 43)
        self.assertEqual(age_from_dob("12/05/1980", today=date(2024, 5, 12)), 44)
        self.assertEqual(age_from_dob("12/05/1980", today=date(2024, 4, 30)), 43)
        self.assertIsNone(age_from_dob("not a date"))

    def test_age_defaults_to_today(self) -> None:
        age = age_from_dob("01/01/2000")
        self.assertIsInstance(age, int)
        self.assertEqual(age, date.today().year - 2000)


class NumericHelpersTests(unittest.TestCase):
    def test_bmi_formats_one_decimal(self) -> None:
        self.assertEqual(bmi(70, 175), "22.9")
        self.assertEqual(bmi("70", "175"), "22.9")
        self.assertEqual(bmi(89, 200), "22.3")

    def test_bmi_rejects_unusable_inputs(self) -> None:
        self.assertIsNone(bmi(70, 0))
        self.assertIsNone(bmi(70, -5))
        self.assertIsNone(bmi("x", 175))
        self.assertIsNone(bmi(None, 175))
        self.assertIsNone(bmi(float("inf"), 175))

    def test_parse_range_accepts_hyphen_and_en_dash(self) -> None:
        self.assertEqual(parse_range("5-12"), {"lo": 5, "hi": 12})
        self.assertEqual(parse_range("5–12"), {"lo": 5, "hi": 12})
        self.assertEqual(parse_range(" 5 - 12 "), {"lo": 5, "hi": 12})
        self.assertEqual(parse_range("5 ng-12 ng"), {"lo": 5, "hi": 12})
        self.assertEqual(parse_range("4.5-8.5"), {"lo": 4.5, "hi": 8.5})

    def test_parse_range_rejects_malformed_text(self) -> None:
        for text in ("abc", "", None, "5-12-15", "-5-12", "5—12", 5, "a-12"):
            with self.subTest(text=text):
                self.assertIsNone(parse_range(text))

    def test_c0_reference_range(self) -> None:
        self.assertTrue(in_therapeutic_range_c0(8))
        self.assertTrue(in_therapeutic_range_c0(5))
        self.assertTrue(in_therapeutic_range_c0(12))
        self.assertTrue(in_therapeutic_range_c0("7.5"))
        self.assertFalse(in_therapeutic_range_c0(13))
        self.assertFalse(in_therapeutic_range_c0(4.99))
        self.assertIsNone(in_therapeutic_range_c0("x"))
        self.assertIsNone(in_therapeutic_range_c0(None))


class RowClassifierTests(unittest.TestCase):
    def test_in_target_for_row_is_inclusive(self) -> None:
        self.assertTrue(in_target_for_row({TARGET_RANGE_COLUMN: "5–10", TROUGH_C0_COLUMN: 7.8}))
        self.assertTrue(in_target_for_row({TARGET_RANGE_COLUMN: "5-10", TROUGH_C0_COLUMN: 10}))
        self.assertFalse(in_target_for_row({TARGET_RANGE_COLUMN: "5-10", TROUGH_C0_COLUMN: 11}))

    def test_in_target_for_row_needs_both_columns(self) -> None:
        self.assertIsNone(in_target_for_row({TARGET_RANGE_COLUMN: "5-10"}))
        self.assertIsNone(in_target_for_row({TARGET_RANGE_COLUMN: "5-10", TROUGH_C0_COLUMN: None}))
        self.assertIsNone(in_target_for_row({TARGET_RANGE_COLUMN: "n/a", TROUGH_C0_COLUMN: 7}))
        self.assertIsNone(in_target_for_row({TARGET_RANGE_COLUMN: "5-10", TROUGH_C0_COLUMN: "abc"}))
        self.assertIsNone(in_target_for_row({}))
        self.assertIsNone(in_target_for_row(None))

    def test_age_groups(self) -> None:
        self.assertTrue(in_age_group(72, "70+"))
        self.assertTrue(in_age_group(70, "70+"))
        self.assertFalse(in_age_group(69, "70+"))
        self.assertTrue(in_age_group(45, "30-49"))
        self.assertTrue(in_age_group("45", "30-49"))
        self.assertFalse(in_age_group(50, "30-49"))

    def test_age_group_edge_cases(self) -> None:
        self.assertFalse(in_age_group(None, "30-49"))
        self.assertFalse(in_age_group(None, ""))
        self.assertTrue(in_age_group(20, ""))
        self.assertTrue(in_age_group(20, None))
        self.assertFalse(in_age_group(45, "abc"))
        self.assertFalse(in_age_group(45, "30–49"))
        self.assertFalse(in_age_group(45, "old+"))


class PageHelpersTests(unittest.TestCase):
    def test_get_param_reads_query_string(self) -> None:
        url = "https://example.org/patient.html?patient=P%20001&tab=2&patient=P002"
        self.assertEqual(get_param(url, "patient"), "P 001")
        self.assertEqual(get_param(url, "tab"), "2")
        self.assertIsNone(get_param(url, "missing"))
        self.assertEqual(get_param("page.html?patient=", "patient"), "")
        self.assertEqual(get_param("page.html?patient=a+b", "patient"), "a b")

    def test_dosage_link_encodes_patient_id(self) -> None:
        self.assertEqual(dosage_link("P001"), "predicted-dosage-trend.html?patient=P001")
        self.assertEqual(dosage_link("A 1/2"), "predicted-dosage-trend.html?patient=A%201%2F2")
        self.assertEqual(dosage_link("x&y=z"), "predicted-dosage-trend.html?patient=x%26y%3Dz")
        self.assertEqual(dosage_link("it's(ok)!"), "predicted-dosage-trend.html?patient=it's(ok)!")
        self.assertEqual(dosage_link(42), "predicted-dosage-trend.html?patient=42")


if __name__ == "__main__":
    unittest.main()
