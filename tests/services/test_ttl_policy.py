"""Tests for TTLPolicy."""

from __future__ import annotations

import pytest

from namevault.services.ttl_policy import TTLPolicy
from namevault.shared.constants import BASE_DAY, TTLClasses
from namevault.shared.errors import DomainError, ErrorCode


class TestTTLPolicy:
    def test_default_classes(self) -> None:
        policy = TTLPolicy()

        assert policy.classes == {TTLClasses.NAMES, TTLClasses.MARKET_OFFERS, TTLClasses.STATUS}
        assert policy.ttl(TTLClasses.NAMES) == 30 * BASE_DAY

    def test_custom_mapping(self) -> None:
        policy = TTLPolicy({"quotes": 60})

        assert policy.ttl("quotes") == 60
        assert "quotes" in policy
        assert TTLClasses.NAMES not in policy
        assert policy.as_dict() == {"quotes": 60}

    def test_unknown_class(self) -> None:
        with pytest.raises(DomainError) as exc_info:
            TTLPolicy().ttl("weather")

        assert exc_info.value.code == ErrorCode.UNKNOWN_TTL_CLASS

    @pytest.mark.parametrize("seconds", [0, -10])
    def test_non_positive_ttl_is_rejected(self, seconds: int) -> None:
        with pytest.raises(DomainError):
            TTLPolicy({"names": seconds})
