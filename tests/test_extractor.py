# Copyright 2018 Brian T. Park
#
# MIT License

import unittest

from tzdbtools.data_types.errors import ModelError
from tzdbtools.data_types.errors import TzdbSyntaxError
from tzdbtools.data_types.tz_types import DateSpec
from tzdbtools.data_types.tz_types import FixedSavings
from tzdbtools.data_types.tz_types import Link
from tzdbtools.data_types.tz_types import MAX_YEAR
from tzdbtools.data_types.tz_types import MIN_YEAR
from tzdbtools.data_types.tz_types import NamedRuleSet
from tzdbtools.data_types.tz_types import NoSavings
from tzdbtools.data_types.tz_types import START_OF_YEAR
from tzdbtools.extractor.calendar import month_to_index
from tzdbtools.extractor.calendar import weekday_to_index
from tzdbtools.extractor.datespec import parse_date_spec
from tzdbtools.extractor.datespec import parse_day_spec
from tzdbtools.extractor.datespec import parse_time
from tzdbtools.extractor.datespec import parse_time_suffix
from tzdbtools.extractor.datespec import parse_year
from tzdbtools.extractor.extractor import CompilationSession
from tzdbtools.extractor.extractor import Extractor
from tzdbtools.extractor.extractor import parse_lines
from tzdbtools.extractor.extractor import strip_comment


class TestParseTimeSuffix(unittest.TestCase):
    def test_parse_time_suffix(self) -> None:
        self.assertEqual('w', parse_time_suffix('2:00'))
        self.assertEqual('w', parse_time_suffix('2:00w'))
        self.assertEqual('s', parse_time_suffix('12:00s'))
        self.assertEqual('u', parse_time_suffix('12:00g'))
        self.assertEqual('u', parse_time_suffix('12:00u'))
        self.assertEqual('u', parse_time_suffix('12:00z'))

    def test_unknown_suffix_is_wall(self) -> None:
        self.assertEqual('w', parse_time_suffix('2:00p'))


class TestMonthToIndex(unittest.TestCase):
    def test_month_to_index_success(self) -> None:
        self.assertEqual(1, month_to_index('Jan'))
        self.assertEqual(1, month_to_index('jan'))
        self.assertEqual(1, month_to_index('January'))

        self.assertEqual(2, month_to_index('Feb'))
        self.assertEqual(2, month_to_index('feb'))
        self.assertEqual(2, month_to_index('February'))

        self.assertEqual(3, month_to_index('mar'))
        self.assertEqual(3, month_to_index('Mar'))
        self.assertEqual(3, month_to_index('March'))

        self.assertEqual(5, month_to_index('may'))
        self.assertEqual(5, month_to_index('MAY'))

        self.assertEqual(9, month_to_index('sep'))
        self.assertEqual(9, month_to_index('September'))

        self.assertEqual(12, month_to_index('dec'))
        self.assertEqual(12, month_to_index('Dec'))
        self.assertEqual(12, month_to_index('December'))

    def test_month_to_index_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, month_to_index, '')
        self.assertRaises(TzdbSyntaxError, month_to_index, 'none')
        self.assertRaises(TzdbSyntaxError, month_to_index, 'ja')
        self.assertRaises(TzdbSyntaxError, month_to_index, 'fe')


class TestWeekdayToIndex(unittest.TestCase):
    def test_weekday_to_index(self) -> None:
        self.assertEqual(1, weekday_to_index('Mon'))
        self.assertEqual(1, weekday_to_index('monday'))
        self.assertEqual(5, weekday_to_index('Fri'))
        self.assertEqual(7, weekday_to_index('Sun'))
        self.assertEqual(7, weekday_to_index('Sunday'))

    def test_weekday_to_index_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, weekday_to_index, '')
        self.assertRaises(TzdbSyntaxError, weekday_to_index, 'Su')
        self.assertRaises(TzdbSyntaxError, weekday_to_index, 'Sunny')


class TestParseYear(unittest.TestCase):
    def test_parse_year(self) -> None:
        self.assertEqual(1996, parse_year('1996', 0))
        self.assertEqual(MIN_YEAR, parse_year('min', 0))
        self.assertEqual(MIN_YEAR, parse_year('minimum', 0))
        self.assertEqual(MAX_YEAR, parse_year('max', 0))
        self.assertEqual(MAX_YEAR, parse_year('Maximum', 0))
        self.assertEqual(1980, parse_year('only', 1980))

    def test_parse_year_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, parse_year, 'abc', 0)
        self.assertRaises(TzdbSyntaxError, parse_year, '', 0)


class TestParseTime(unittest.TestCase):
    def test_parse_time(self) -> None:
        self.assertEqual(0, parse_time('0'))
        self.assertEqual(7200000, parse_time('2:00'))
        self.assertEqual(7200000, parse_time('2:00s'))
        self.assertEqual(90000000, parse_time('25:00'))
        self.assertEqual(3723500, parse_time('1:02:03.5'))
        self.assertEqual(-20196000, parse_time('-5:36:36'))

    def test_negation_is_additive_inverse(self) -> None:
        self.assertEqual(9000000, parse_time('2:30'))
        self.assertEqual(-9000000, parse_time('-2:30'))
        self.assertEqual(0, parse_time('2:30') + parse_time('-2:30'))

    def test_parse_time_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, parse_time, '')
        self.assertRaises(TzdbSyntaxError, parse_time, '-')
        self.assertRaises(TzdbSyntaxError, parse_time, 'US')
        self.assertRaises(TzdbSyntaxError, parse_time, '1:60')
        self.assertRaises(TzdbSyntaxError, parse_time, '1:00:60')
        self.assertRaises(TzdbSyntaxError, parse_time, '2:xx')


class TestParseDateSpec(unittest.TestCase):
    def test_parse_day_spec(self) -> None:
        self.assertEqual((20, 0, False), parse_day_spec('20'))
        self.assertEqual((-1, 7, False), parse_day_spec('lastSun'))
        self.assertEqual((8, 7, True), parse_day_spec('Sun>=8'))
        self.assertEqual((25, 5, False), parse_day_spec('Fri<=25'))

    def test_parse_day_spec_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'Foo')
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'Sun=8')
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'Sun>=x')
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'lastFoo')

    def test_parse_day_spec_rejects_non_decimal_digits(self) -> None:
        # '²' is a unicode digit that int() cannot convert.
        self.assertRaises(TzdbSyntaxError, parse_day_spec, '²')
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'Sun>=²')
        self.assertRaises(TzdbSyntaxError, parse_day_spec, 'Fri<=1²')

    def test_parse_date_spec(self) -> None:
        self.assertEqual(START_OF_YEAR, parse_date_spec([]))
        self.assertEqual(
            DateSpec(3, 1, 0, False, 0, 'w'), parse_date_spec(['Mar']))
        self.assertEqual(
            DateSpec(10, -1, 7, False, 7200000, 'w'),
            parse_date_spec(['Oct', 'lastSun', '2:00']))
        self.assertEqual(
            DateSpec(3, 8, 7, True, 7200000, 's'),
            parse_date_spec(['Mar', 'Sun>=8', '2:00s']))
        self.assertEqual(
            DateSpec(4, 25, 7, False, 3600000, 'u'),
            parse_date_spec(['Apr', 'Sun<=25', '1:00u']))
        self.assertEqual(
            DateSpec(4, 1, 0, False, 3600000, 'u'),
            parse_date_spec(['Apr', '1', '1:00g']))
        self.assertEqual(
            DateSpec(11, 18, 0, False, 43764000, 'w'),
            parse_date_spec(['Nov', '18', '12:09:24']))

    def test_parse_date_spec_failure(self) -> None:
        self.assertRaises(TzdbSyntaxError, parse_date_spec, ['Foo'])
        self.assertRaises(TzdbSyntaxError, parse_date_spec, ['Jan', 'Foo'])
        self.assertRaises(
            TzdbSyntaxError, parse_date_spec, ['Jan', '1', '2:xx'])
        self.assertRaises(
            TzdbSyntaxError, parse_date_spec, ['Jan', '1', '2:00', 'x'])


class TestParseLines(unittest.TestCase):
    def test_strip_comment(self) -> None:
        self.assertEqual('Rule US ', strip_comment('Rule US # comment'))
        self.assertEqual('', strip_comment('# comment'))
        self.assertEqual('Link a b', strip_comment('Link a b'))

    def test_zone_with_continuation_lines(self) -> None:
        session = CompilationSession()
        parse_lines([
            '# Zone NAME            STDOFF  RULES  FORMAT  [UNTIL]',
            'Zone America/Chicago   -5:50:36 -     LMT     1883 Nov 18 12:09:24',
            '                       -6:00   US     C%sT    1920',
            '',
            '   # comment inside the zone',
            '                       -6:00   1:00   CDT     1921 Jan 1',
            '                       -6:00   US     C%sT',
            'Link America/Chicago US/Central',
        ], session)

        self.assertEqual(1, len(session.zones))
        zone = session.zones[0]
        self.assertEqual('America/Chicago', zone.name)
        self.assertEqual(4, len(zone.eras))
        self.assertEqual(NoSavings(), zone.eras[0].rules)
        self.assertEqual(-21036000, zone.eras[0].std_offset_millis)
        self.assertEqual(1883, zone.eras[0].until.year)
        self.assertEqual(NamedRuleSet('US'), zone.eras[1].rules)
        self.assertEqual(FixedSavings(3600000), zone.eras[2].rules)
        self.assertIsNone(zone.eras[3].until)
        self.assertEqual(
            [Link('America/Chicago', 'US/Central')], session.links)

    def test_rules_are_merged_into_rule_set(self) -> None:
        session = CompilationSession()
        parse_lines([
            'Rule US 1967 2006 - Oct lastSun 2:00 0 S',
            'Rule US 2007 max  - Mar Sun>=8  2:00 1:00 D',
            'Rule EU 1981 max  - Mar lastSun 1:00u 1:00 S',
        ], session)

        self.assertEqual(['US', 'EU'], list(session.rule_sets.keys()))
        us = session.rule_sets['US']
        self.assertEqual(2, len(us))
        self.assertEqual(1967, us.rules[0].from_year)
        self.assertEqual(MAX_YEAR, us.rules[1].to_year)
        self.assertEqual('D', us.rules[1].letter)
        self.assertEqual('u', session.rule_sets['EU'].rules[0]
                         .date_spec.time_suffix)

    def test_unknown_line_is_skipped(self) -> None:
        session = CompilationSession()
        with self.assertLogs(level='WARNING') as cm:
            parse_lines(['Leap 2016 Dec 31 23:59:60 + S'], session)
        self.assertIn('Unknown line', cm.output[0])
        self.assertEqual(0, len(session.zones))

    def test_continuation_without_zone_is_skipped(self) -> None:
        session = CompilationSession()
        with self.assertLogs(level='WARNING'):
            parse_lines(['    -6:00 US C%sT'], session)
        self.assertEqual(0, len(session.zones))

    def test_error_carries_line_number(self) -> None:
        session = CompilationSession()
        with self.assertRaises(TzdbSyntaxError) as cm:
            parse_lines([
                'Rule US 1967 2006 - Oct lastSun 2:00 0 S',
                'Rule US 1967 2006 - Foo lastSun 2:00 0 S',
            ], session, 'northamerica')
        self.assertIn('northamerica:2:', str(cm.exception))

    def test_superscript_day_is_syntax_error(self) -> None:
        session = CompilationSession()
        with self.assertRaises(TzdbSyntaxError) as cm:
            parse_lines(
                ['Rule US 1967 2006 - Oct ² 2:00 0 S'], session, 'northamerica')
        self.assertIn('northamerica:1:', str(cm.exception))

    def test_superscript_until_year_is_syntax_error(self) -> None:
        session = CompilationSession()
        with self.assertRaises(TzdbSyntaxError) as cm:
            parse_lines(
                ['Zone Test/Zone 1:00 - TST 19²'], session, 'europe')
        self.assertIn('europe:1:', str(cm.exception))

    def test_to_year_before_from_year(self) -> None:
        session = CompilationSession()
        with self.assertRaises(ModelError):
            parse_lines(['Rule US 2000 1999 - Oct lastSun 2:00 0 S'], session)

    def test_extractor_parse_text(self) -> None:
        extractor = Extractor()
        extractor.parse_text(
            'Zone Etc/UTC 0 - UTC\n'
            'Link Etc/UTC Etc/Universal\n')
        session = extractor.get_data()
        self.assertEqual(['Etc/UTC'], [z.name for z in session.zones])
        self.assertEqual(1, len(session.links))


if __name__ == '__main__':
    unittest.main()
