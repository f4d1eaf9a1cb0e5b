"""Unit tests for the throttling back-off wrapper."""

from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

import throttling


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


@pytest.fixture
def mock_sleep():
    with patch("throttling.time.sleep") as sleep:
        yield sleep


class TestThrottlingBackOff:

    def test_returns_result_without_retry(self, mock_sleep):
        request = Mock(return_value={"ok": True})

        assert throttling.throttling_back_off(request) == {"ok": True}
        request.assert_called_once_with()
        mock_sleep.assert_not_called()

    @pytest.mark.parametrize(
        "code", ["ThrottlingException", "TooManyRequestsException", "ConcurrentModificationException"]
    )
    def test_retries_rate_limit_errors(self, mock_sleep, code):
        request = Mock(side_effect=[client_error(code), client_error(code), "done"])

        assert throttling.throttling_back_off(request) == "done"
        assert request.call_count == 3
        assert mock_sleep.call_count == 2

    def test_other_errors_are_raised_immediately(self, mock_sleep):
        request = Mock(side_effect=client_error("AccessDeniedException"))

        with pytest.raises(ClientError) as error:
            throttling.throttling_back_off(request)

        assert error.value.response["Error"]["Code"] == "AccessDeniedException"
        request.assert_called_once_with()
        mock_sleep.assert_not_called()

    def test_gives_up_after_max_attempts(self, mock_sleep):
        request = Mock(side_effect=client_error("ThrottlingException"))

        with pytest.raises(ClientError):
            throttling.throttling_back_off(request, max_attempts=4)

        assert request.call_count == 4
        assert mock_sleep.call_count == 3

    def test_non_client_errors_are_not_retried(self, mock_sleep):
        request = Mock(side_effect=KeyError("Policy"))

        with pytest.raises(KeyError):
            throttling.throttling_back_off(request)

        mock_sleep.assert_not_called()


class TestComputeDelay:

    def test_delay_is_bounded_by_exponential_ceiling(self):
        with patch("throttling.random.uniform", side_effect=lambda low, high: high):
            assert throttling.compute_delay(0) == pytest.approx(0.15)
            assert throttling.compute_delay(1) == pytest.approx(0.3)
            assert throttling.compute_delay(3) == pytest.approx(1.2)

    def test_delay_is_capped(self):
        with patch("throttling.random.uniform", side_effect=lambda low, high: high):
            assert throttling.compute_delay(20) == throttling.MAX_DELAY_SECONDS


def test_is_throttling_error():
    assert throttling.is_throttling_error(client_error("Throttling"))
    assert not throttling.is_throttling_error(client_error("PolicyNotFoundException"))
    assert not throttling.is_throttling_error(ValueError("Throttling"))
