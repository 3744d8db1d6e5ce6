"""
Tests for new-session payload encoding.
"""

import pytest

from driverwire.capabilities import Capabilities, Proxy, ProxyType, UnexpectedAlertBehaviour
from driverwire.remote.encoder import encode_new_session, is_w3c_key, to_legacy, to_w3c


class TestPayloadShape:
    """The payload carries every dialect's slots at once."""

    @pytest.mark.parametrize(
        "desired,required",
        [
            (None, None),
            ({}, {}),
            (Capabilities.firefox(), None),
            (Capabilities.chrome(), {"se:option": "cheese"}),
        ],
    )
    def test_all_slots_present(self, desired, required):
        """Test that the legacy and W3C slots are always populated."""
        payload = encode_new_session(desired, required)

        assert payload["desiredCapabilities"] is not None
        assert payload["requiredCapabilities"] is not None
        caps = payload["capabilities"]
        assert caps["desiredCapabilities"] is not None
        assert caps["requiredCapabilities"] is not None
        assert isinstance(caps["alwaysMatch"], dict)
        assert isinstance(caps["firstMatch"], list)
        assert len(caps["firstMatch"]) == 1

    def test_geckodriver_slots_mirror_top_level(self):
        """Test that the nested legacy objects equal the top-level ones."""
        payload = encode_new_session({"browserName": "firefox"}, {"marionette": True})
        assert payload["capabilities"]["desiredCapabilities"] == payload["desiredCapabilities"]
        assert payload["capabilities"]["requiredCapabilities"] == payload["requiredCapabilities"]


class TestKeyFiltering:
    """Tests for W3C key filtering."""

    def test_plain_custom_key_only_in_legacy(self):
        """Test that a key without a colon is dropped from W3C objects."""
        payload = encode_new_session(Capabilities(option="cheese"), {"other": 1})

        assert payload["desiredCapabilities"]["option"] == "cheese"
        assert payload["requiredCapabilities"]["other"] == 1
        assert "option" not in payload["capabilities"]["alwaysMatch"]
        for entry in payload["capabilities"]["firstMatch"]:
            assert "option" not in entry
            assert "other" not in entry

    def test_vendor_key_in_both_dialects(self):
        """Test that a vendor-prefixed key survives in both shapes."""
        payload = encode_new_session(Capabilities({"se:option": "cheese"}))

        assert payload["desiredCapabilities"]["se:option"] == "cheese"
        assert payload["capabilities"]["alwaysMatch"]["se:option"] == "cheese"

    @pytest.mark.parametrize(
        "key,expected",
        [
            ("browserName", True),
            ("acceptInsecureCerts", True),
            ("moz:firefoxOptions", True),
            ("goog:chromeOptions", True),
            ("option", False),
            (":option", False),
            ("a:b:c", False),
            ("vendor:", False),
        ],
    )
    def test_is_w3c_key(self, key, expected):
        """Test the extension key pattern."""
        assert is_w3c_key(key) is expected

    def test_required_overrides_desired(self):
        """Test that required values win over desired ones in alwaysMatch."""
        payload = encode_new_session(
            {"browserName": "firefox", "acceptInsecureCerts": True},
            {"acceptInsecureCerts": False, "pageLoadStrategy": "eager"},
        )
        caps = payload["capabilities"]
        assert caps["alwaysMatch"]["acceptInsecureCerts"] is False
        assert caps["firstMatch"] == [{"pageLoadStrategy": "eager"}]

    def test_none_values_dropped_from_w3c(self):
        """Test that unset W3C values are not sent."""
        assert to_w3c({"browserName": "safari", "pageLoadStrategy": None}) == {
            "browserName": "safari"
        }


class TestLegacyTranslation:
    """Tests for legacy version and platform keys."""

    def test_version_becomes_browser_version(self):
        """Test that a non-empty legacy version maps to browserVersion."""
        w3c = to_w3c({"browserName": "firefox", "version": "52"})
        assert w3c["browserVersion"] == "52"
        assert "version" not in w3c

    def test_empty_version_is_omitted(self):
        """Test that the empty default version is not forwarded."""
        assert "browserVersion" not in to_w3c(Capabilities.chrome())

    def test_any_platform_is_omitted(self):
        """Test that the ANY platform wildcard is not forwarded."""
        assert "platformName" not in to_w3c(Capabilities.chrome())

    def test_platform_lower_cased(self):
        """Test that the legacy platform maps to a lower-case platformName."""
        assert to_w3c(Capabilities.safari())["platformName"] == "mac"

    def test_explicit_w3c_values_win(self):
        """Test that explicit W3C names are not overwritten."""
        w3c = to_w3c({"version": "1", "browserVersion": "2", "platform": "LINUX", "platformName": "windows"})
        assert w3c["browserVersion"] == "2"
        assert w3c["platformName"] == "windows"


class TestAlertBehaviour:
    """Tests for unexpectedAlertBehaviour remapping."""

    def test_copied_to_prompt_behaviour(self):
        """Test that both dialect spellings are present."""
        payload = encode_new_session({"unexpectedAlertBehaviour": "dismiss"})

        assert payload["desiredCapabilities"]["unexpectedAlertBehaviour"] == "dismiss"
        assert payload["desiredCapabilities"]["unhandledPromptBehavior"] == "dismiss"
        assert payload["capabilities"]["alwaysMatch"]["unhandledPromptBehavior"] == "dismiss"
        assert "unexpectedAlertBehaviour" not in payload["capabilities"]["alwaysMatch"]

    def test_enum_value_serialized(self):
        """Test that enum values are sent as their string value."""
        caps = Capabilities(unexpectedAlertBehaviour=UnexpectedAlertBehaviour.ACCEPT)
        assert to_legacy(caps)["unhandledPromptBehavior"] == "accept"


class TestProxyEncoding:
    """Tests for dialect-specific proxy serialization."""

    def test_autodetect_casing(self):
        """Test that the proxy type is lower-cased only for W3C."""
        caps = Capabilities(proxy=Proxy(proxy_type=ProxyType.AUTODETECT))
        payload = encode_new_session(caps)

        assert payload["capabilities"]["alwaysMatch"]["proxy"]["proxyType"] == "autodetect"
        assert payload["desiredCapabilities"]["proxy"]["proxyType"] == "AUTODETECT"

    def test_raw_mapping_proxy(self):
        """Test that a proxy given as a plain mapping is normalized."""
        caps = {"proxy": {"proxyType": "MANUAL", "httpProxy": "localhost:8080", "noProxy": "a, b"}}
        w3c = to_w3c(caps)

        assert w3c["proxy"]["proxyType"] == "manual"
        assert w3c["proxy"]["httpProxy"] == "localhost:8080"
        assert w3c["proxy"]["noProxy"] == ["a", "b"]
        assert to_legacy(caps)["proxy"]["proxyType"] == "MANUAL"

    def test_legacy_proxy_keeps_string_no_proxy(self):
        """Test that the legacy form keeps a comma-separated noProxy."""
        proxy = Proxy(proxy_type=ProxyType.MANUAL, http_proxy="h:1", no_proxy="a,b")
        assert to_legacy({"proxy": proxy})["proxy"]["noProxy"] == "a,b"

    def test_plain_autodetect_mapping(self):
        """Test that a plain upper-case mapping is lower-cased for W3C only."""
        caps = Capabilities(proxy={"proxyType": "AUTODETECT"})
        payload = encode_new_session(caps)

        assert payload["capabilities"]["alwaysMatch"]["proxy"] == {"proxyType": "autodetect"}
        assert payload["desiredCapabilities"]["proxy"] == {"proxyType": "AUTODETECT"}

    @pytest.mark.parametrize(
        "proxy",
        [
            {"proxyType": "bogus"},
            {"proxyType": "MANUAL", "socksProxy": "s:1080", "socksVersion": 3},
        ],
    )
    def test_unparseable_mapping_sent_unchanged(self, proxy):
        """Test that a proxy the model rejects does not stop encoding."""
        payload = encode_new_session(Capabilities(proxy=proxy))

        w3c = payload["capabilities"]["alwaysMatch"]["proxy"]
        assert w3c == {**proxy, "proxyType": proxy["proxyType"].lower()}
        assert payload["desiredCapabilities"]["proxy"] == proxy
