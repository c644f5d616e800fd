import pytest

from geospoof.adapters.geocoding_nominatim import DEFAULT_BASE_URL
from geospoof.viewmodels.settings_vm import LocSimSettings, SettingsVM


def test_defaults_round_trip():
    payload = SettingsVM().to_dict()
    assert payload["map_span_degrees"] == 0.02
    assert payload["auto_start_from_bookmarks"] is False
    assert payload["geocoder_base_url"] == DEFAULT_BASE_URL

    vm = SettingsVM()
    vm.apply_dict(payload)
    assert vm.config == LocSimSettings()


def test_apply_dict_coerces_values():
    vm = SettingsVM()
    vm.apply_dict(
        {
            "auto_center_on_selection": "off",
            "damped_animations": 0,
            "search_limit": "5",
            "fix_grace_s": "2.5",
            "geocoder_base_url": "  ",
            "debug_logging": "yes",
        }
    )

    assert vm.config.auto_center_on_selection is False
    assert vm.config.damped_animations is False
    assert vm.config.search_limit == 5
    assert vm.config.timings.fix_grace_s == 2.5
    assert vm.config.timings.overall_timeout_s == 3.5
    assert vm.config.geocoder_base_url == DEFAULT_BASE_URL
    assert vm.debug_logging is True


@pytest.mark.parametrize(
    "payload",
    [
        {"unknown": 1},
        {"map_span_degrees": 0},
        {"map_span_degrees": "wide"},
        {"search_limit": 0},
        {"request_timeout_s": True},
        {"restart_delay_s": -1},
    ],
)
def test_apply_dict_rejects_invalid(payload):
    vm = SettingsVM()
    with pytest.raises(ValueError):
        vm.apply_dict(payload)
    assert vm.config == LocSimSettings()


def test_apply_dict_requires_mapping():
    with pytest.raises(ValueError):
        SettingsVM().apply_dict(["map_span_degrees"])


def test_partial_payload_keeps_other_defaults():
    vm = SettingsVM()
    vm.apply_dict({"map_span_degrees": "0.5", "auto_start_from_bookmarks": "true"})

    assert vm.config.map_span_degrees == 0.5
    assert vm.config.auto_start_from_bookmarks is True
    assert vm.config.search_limit == LocSimSettings().search_limit

    snapshot = vm.to_dict()
    assert snapshot["map_span_degrees"] == 0.5
    assert set(snapshot) == {*LocSimSettings.__annotations__.keys(), "debug_logging"}
