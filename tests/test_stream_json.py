"""Tests for the FUELINST stream JSON codec and legacy row synthesis."""

import json
from datetime import datetime, timezone

import pytest

from fuelinst import stream_json
from fuelinst.errors import FormatError, IntegrityError
from fuelinst.models import FuelTemplate, Sample

T0 = datetime(2024, 2, 12, 17, 45, tzinfo=timezone.utc)
T1 = datetime(2024, 2, 12, 17, 50, tzinfo=timezone.utc)


class TestDecode:
    """Test grouping of stream records by interval."""

    def test_groups_by_start_time(self, stream_records):
        """Records are bucketed by startTime, ascending."""
        grouped = stream_json.decode(stream_records)
        assert list(grouped) == [T0, T1]
        assert set(grouped[T0]) == {"BIOMASS", "CCGT"}
        assert set(grouped[T1]) == {"CCGT", "PS"}

    def test_resent_fuel_type_overwrites(self, stream_records):
        """A later record for the same fuel and interval replaces the earlier one."""
        grouped = stream_json.decode(stream_records)
        assert grouped[T0]["BIOMASS"].generation == 864

    def test_negative_generation_kept_without_clamp(self, stream_records):
        """Negative generation survives when clamping is off."""
        grouped = stream_json.decode(stream_records)
        assert grouped[T1]["PS"].generation == -350

    def test_clamp_non_negative(self, stream_records):
        """Clamping floors generation at zero."""
        grouped = stream_json.decode(stream_records, clamp_non_negative=True)
        assert grouped[T1]["PS"].generation == 0
        assert grouped[T1]["CCGT"].generation == 6100

    def test_json_text_input(self, stream_records):
        """Raw JSON text decodes the same as parsed records."""
        assert stream_json.decode(json.dumps(stream_records)) == stream_json.decode(stream_records)

    def test_data_wrapper(self, stream_records):
        """The {"data": [...]} wrapper is unwrapped."""
        assert stream_json.decode({"data": stream_records}) == stream_json.decode(stream_records)

    def test_empty_array(self):
        """No records gives no intervals."""
        assert stream_json.decode("[]") == {}

    def test_wrong_dataset(self, stream_records):
        """Records from another dataset are rejected."""
        stream_records[2]["dataset"] = "FREQ"
        with pytest.raises(FormatError) as exc:
            stream_json.decode(stream_records)
        assert exc.value.index == 2

    def test_lowercase_fuel_type(self, stream_records):
        """Fuel types must be upper-case alphanumerics."""
        stream_records[0]["fuelType"] = "biomass"
        with pytest.raises(FormatError):
            stream_json.decode(stream_records)

    def test_zero_settlement_period(self, stream_records):
        """Settlement periods start at 1."""
        stream_records[0]["settlementPeriod"] = 0
        with pytest.raises(FormatError):
            stream_json.decode(stream_records)

    def test_missing_start_time(self, stream_records):
        """startTime is required."""
        del stream_records[1]["startTime"]
        with pytest.raises(FormatError):
            stream_json.decode(stream_records)

    def test_naive_start_time(self, stream_records):
        """Times without a UTC offset are rejected."""
        stream_records[0]["startTime"] = "2024-02-12T17:45:00"
        with pytest.raises(FormatError):
            stream_json.decode(stream_records)

    def test_invalid_json(self):
        """Unparseable text is a format error."""
        with pytest.raises(FormatError):
            stream_json.decode("[{")

    def test_not_an_array(self):
        """A bare object without data is rejected."""
        with pytest.raises(FormatError):
            stream_json.decode({"dataset": "FUELINST"})


class TestRowSynthesis:
    """Test conversion of grouped intervals to legacy rows."""

    def test_missing_fuel_fills_zero(self):
        """Template fuels absent from the interval become "0"."""
        template = FuelTemplate.parse("type,date,period,timestamp,BIOMASS,CCGT,COAL")
        mix = {
            "BIOMASS": Sample(T0, "BIOMASS", 864, 36),
            "CCGT": Sample(T0, "CCGT", 6030, 36),
        }
        row = stream_json.interval_to_row(T0, mix, template)
        assert row == ("FUELINST", "20240212", "36", "20240212174500", "864", "6030", "0")

    def test_empty_template_position(self):
        """Empty template names still occupy a position on encode."""
        template = FuelTemplate.parse("type,date,period,timestamp,CCGT,,COAL")
        mix = {"CCGT": Sample(T0, "CCGT", 5, 36)}
        assert stream_json.interval_to_row(T0, mix, template)[4:] == ("5", "0", "0")

    def test_settlement_period_mismatch(self):
        """Samples in one interval must agree on settlement period."""
        template = FuelTemplate.parse("type,date,period,timestamp,BIOMASS,CCGT")
        mix = {
            "BIOMASS": Sample(T0, "BIOMASS", 864, 36),
            "CCGT": Sample(T0, "CCGT", 6030, 37),
        }
        with pytest.raises(IntegrityError):
            stream_json.interval_to_row(T0, mix, template)

    def test_time_mismatch(self):
        """A sample filed under the wrong interval is rejected."""
        template = FuelTemplate.parse("type,date,period,timestamp,CCGT")
        with pytest.raises(IntegrityError):
            stream_json.interval_to_row(T0, {"CCGT": Sample(T1, "CCGT", 1, 36)}, template)

    def test_fuel_type_mismatch(self):
        """A sample filed under another fuel's key is rejected."""
        template = FuelTemplate.parse("type,date,period,timestamp,CCGT")
        with pytest.raises(IntegrityError):
            stream_json.interval_to_row(T0, {"CCGT": Sample(T0, "OCGT", 1, 36)}, template)

    def test_empty_interval(self):
        """An interval with no samples cannot be converted."""
        template = FuelTemplate.parse("type,date,period,timestamp,CCGT")
        with pytest.raises(IntegrityError):
            stream_json.interval_to_row(T0, {}, template)

    def test_intervals_to_rows_ordered(self, stream_records):
        """All intervals convert, oldest first."""
        template = FuelTemplate.parse("type,date,period,timestamp,BIOMASS,CCGT,PS")
        grouped = stream_json.decode(stream_records, clamp_non_negative=True)
        rows = stream_json.intervals_to_rows(grouped, template)
        assert rows == (
            ("FUELINST", "20240212", "36", "20240212174500", "864", "6030", "0"),
            ("FUELINST", "20240212", "36", "20240212175000", "0", "6100", "0"),
        )
