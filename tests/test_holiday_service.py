"""Tests for the holiday list."""

import json
from unittest.mock import patch

import pytest

from infrastructure import JsonFileStore, HolidayRepository
from monitoring import ValidationError, NotFoundError, PersistenceError


class TestHolidayService:

    def test_add_and_list_sorted(self, services, data_dir):
        services.holidays.add_holiday("2024-05-03", "憲法記念日")
        services.holidays.add_holiday("2024-01-01", " 元日 ")

        holidays = services.holidays.list_holidays()

        assert [(h.date, h.name) for h in holidays] == [
            ("2024-01-01", "元日"), ("2024-05-03", "憲法記念日")
        ]
        assert holidays[0].id.startswith("hol-20240101-")

        saved = json.loads((data_dir / "holidays.json").read_text(encoding="utf-8"))
        assert [h["name"] for h in saved] == ["元日", "憲法記念日"]

    @pytest.mark.parametrize("date,name", [("", "元日"), ("2024-01-01", ""), ("2024-01-01", None)])
    def test_requires_date_and_name(self, services, date, name):
        with pytest.raises(ValidationError) as exc_info:
            services.holidays.add_holiday(date, name)
        assert exc_info.value.message == "休日の日付と名称を入力してください。"

    def test_rejects_invalid_date(self, services, data_dir):
        with pytest.raises(ValidationError):
            services.holidays.add_holiday("2024-02-30", "存在しない日")
        assert not (data_dir / "holidays.json").exists()

    def test_remove(self, services):
        holiday = services.holidays.add_holiday("2024-01-01", "元日")
        services.holidays.remove_holiday(holiday.id)
        assert services.holidays.list_holidays() == []

    def test_remove_unknown(self, services):
        with pytest.raises(NotFoundError):
            services.holidays.remove_holiday("hol-missing")

    def test_round_trip_through_holidays_file(self, services, data_dir):
        first = services.holidays.add_holiday("2024-05-03", "憲法記念日")
        second = services.holidays.add_holiday("2024-01-01", "元日")

        reloaded = HolidayRepository(JsonFileStore(data_dir / "holidays.json", default=[]))

        assert reloaded.holidays == [second, first]


class TestHolidaySaveFailures:

    @pytest.fixture
    def failing_save(self, services):
        return patch.object(
            services.holidays.holiday_repository, "save", side_effect=PersistenceError("disk full")
        )

    def test_failed_add_is_not_kept(self, services, failing_save):
        with failing_save, pytest.raises(PersistenceError):
            services.holidays.add_holiday("2024-01-01", "元日")
        assert services.holidays.list_holidays() == []

    def test_failed_remove_keeps_holiday(self, services, failing_save):
        first = services.holidays.add_holiday("2024-01-01", "元日")
        second = services.holidays.add_holiday("2024-05-03", "憲法記念日")

        with failing_save, pytest.raises(PersistenceError):
            services.holidays.remove_holiday(first.id)

        assert services.holidays.list_holidays() == [first, second]
