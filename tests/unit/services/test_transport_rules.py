"""
Unit Tests for transport route rules (stops and schedule)
"""
import pytest

from synexa.core.exceptions import ValidationError
from synexa.schemas.transport import Stop
from synexa.services.transport_service import to_minutes, validate_stops, validate_times


class TestValidateStops:

    def test_sorted_by_order_and_trimmed(self):
        stops = [Stop(name=" Escola ", order=3), Stop(name="Kilamba", order=1), Stop(name="Camama", order=2)]

        assert validate_stops(stops) == [
            {"name": "Kilamba", "order": 1},
            {"name": "Camama", "order": 2},
            {"name": "Escola", "order": 3},
        ]

    def test_duplicate_names_case_insensitive(self):
        stops = [Stop(name="Kilamba", order=1), Stop(name="kilamba ", order=2)]

        with pytest.raises(ValidationError) as exc_info:
            validate_stops(stops)

        assert "paragens duplicadas" in exc_info.value.message

    def test_duplicate_orders(self):
        stops = [Stop(name="Kilamba", order=1), Stop(name="Camama", order=1)]

        with pytest.raises(ValidationError) as exc_info:
            validate_stops(stops)

        assert "ordens duplicadas" in exc_info.value.message


class TestValidateTimes:

    def test_to_minutes(self):
        assert to_minutes("06:30") == 390
        assert to_minutes("7:05") == 425

    def test_departure_before_return(self):
        validate_times("06:30", "13:00")

    @pytest.mark.parametrize("departure,ret", [("13:00", "06:30"), ("07:00", "07:00")])
    def test_departure_not_before_return(self, departure, ret):
        with pytest.raises(ValidationError) as exc_info:
            validate_times(departure, ret)

        assert exc_info.value.message == "Horário de saída deve ser anterior ao horário de retorno"
