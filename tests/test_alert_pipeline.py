import unittest

import requests

from barometer.cache_store import InMemoryCacheStore
from barometer.config import Settings
from barometer.data_sources import AlertFeedResponse, CallableFeedSource
from barometer.domain import Severity
from barometer.pipelines import AlertPipeline

REGIONS = {"Region A": "Region A", "Region B": "Region B", "Region C": "Region C"}


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def _unused():
    raise AssertionError("unexpected upstream call")


class ScriptedAlerts:
    """Callable returning (or raising) the queued answers in order."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        answer = self.answers.pop(0) if len(self.answers) > 1 else self.answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


class TestAlertPipeline(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = InMemoryCacheStore(clock=self.clock)
        self.settings = Settings(major_regions=REGIONS, city_translations={}, alert_cache_seconds=15)

    def _pipeline(self, alerts):
        source = CallableFeedSource(alerts=alerts, market_event=_unused, forecast=_unused)
        return AlertPipeline(source, self.cache, self.settings)

    def _status_for(self, body, status_code=200):
        self.cache.clear()
        return self._pipeline(ScriptedAlerts(AlertFeedResponse(status_code, body))).get_alert_status()

    def test_empty_bodies_are_safe(self):
        for body in ("", "[]", "{}", "\ufeff"):
            status = self._status_for(body)
            self.assertIs(status.severity, Severity.SAFE, msg=repr(body))
            self.assertFalse(status.has_any_alert)
            self.assertEqual(status.active_cities, [])
            self.assertFalse(status.is_from_cache)

    def test_spaced_empty_json_is_safe(self):
        for body in ("{ }", "{\n}", "[ ]", " [\r\n] ", "\ufeff{ }"):
            status = self._status_for(body)
            self.assertIs(status.severity, Severity.SAFE, msg=repr(body))
            self.assertFalse(status.has_any_alert, msg=repr(body))

    def test_returned_status_does_not_alias_cache_entry(self):
        pipeline = self._pipeline(ScriptedAlerts(AlertFeedResponse(200, '[{"data": "Region A, Region B"}]')))

        fresh = pipeline.get_alert_status()
        fresh.active_cities.clear()
        fresh.matched_major_cities.append("Injected")

        cached = pipeline.get_alert_status()
        self.assertTrue(cached.is_from_cache)
        self.assertEqual(len(cached.active_cities), 2)
        self.assertEqual(cached.matched_major_cities, ["Region A", "Region B"])

        cached.active_cities.clear()
        again = pipeline.get_alert_status()
        self.assertEqual(len(again.active_cities), 2)

    def test_two_regions_is_alert(self):
        status = self._status_for('[{"data": "Region A - District 1, Region B"}]')
        self.assertIs(status.severity, Severity.ALERT)
        self.assertTrue(status.has_any_alert)
        self.assertEqual(status.matched_major_cities, ["Region A", "Region B"])
        self.assertEqual([c.raw for c in status.active_cities], ["Region A - District 1", "Region B"])

    def test_three_regions_is_major_alert(self):
        status = self._status_for('[{"data": "Region A - District 1, Region B"}, {"data": "Region C"}]')
        self.assertIs(status.severity, Severity.MAJOR_ALERT)
        self.assertTrue(status.is_major_alert)

    def test_single_object_body(self):
        status = self._status_for('{"id": "1", "cat": "1", "title": "t", "data": "Region C - Port"}')
        self.assertIs(status.severity, Severity.ALERT)
        self.assertEqual(status.matched_major_cities, ["Region C"])

    def test_unrelated_city_is_alert_without_matches(self):
        status = self._status_for('[{"data": "Somewhere Else"}]')
        self.assertIs(status.severity, Severity.ALERT)
        self.assertEqual(status.matched_major_cities, [])

    def test_non_success_status_is_safe(self):
        status = self._status_for('[{"data": "Region A, Region B, Region C"}]', status_code=403)
        self.assertIs(status.severity, Severity.SAFE)
        self.assertFalse(status.has_any_alert)

    def test_garbage_body_is_safe(self):
        status = self._status_for("<html>Access Denied</html>")
        self.assertIs(status.severity, Severity.SAFE)
        self.assertFalse(status.has_any_alert)

    def test_transport_error_is_safe_and_not_cached(self):
        alerts = ScriptedAlerts(
            requests.ConnectionError("boom"),
            AlertFeedResponse(200, '[{"data": "Region A"}]'),
        )
        pipeline = self._pipeline(alerts)

        first = pipeline.get_alert_status()
        self.assertIs(first.severity, Severity.SAFE)
        self.assertFalse(first.has_any_alert)
        self.assertEqual(len(self.cache), 0)

        second = pipeline.get_alert_status()
        self.assertIs(second.severity, Severity.ALERT)
        self.assertFalse(second.is_from_cache)
        self.assertEqual(alerts.calls, 2)

    def test_cache_hit_then_expiry(self):
        alerts = ScriptedAlerts(AlertFeedResponse(200, '[{"data": "Region A"}]'))
        pipeline = self._pipeline(alerts)

        first = pipeline.get_alert_status()
        self.clock.now = 14.0
        second = pipeline.get_alert_status()
        self.assertEqual(alerts.calls, 1)
        self.assertFalse(first.is_from_cache)
        self.assertTrue(second.is_from_cache)
        self.assertEqual(second.cached_at, first.cached_at)
        self.assertEqual(second.severity, first.severity)

        self.clock.now = 16.0
        third = pipeline.get_alert_status()
        self.assertEqual(alerts.calls, 2)
        self.assertFalse(third.is_from_cache)
        self.assertGreaterEqual(third.cached_at, first.cached_at)

    def test_dropping_a_region_after_expiry_downgrades(self):
        alerts = ScriptedAlerts(
            AlertFeedResponse(200, '[{"data": "Region A, Region B, Region C"}]'),
            AlertFeedResponse(200, '[{"data": "Region A, Region B"}]'),
        )
        pipeline = self._pipeline(alerts)
        self.assertIs(pipeline.get_alert_status().severity, Severity.MAJOR_ALERT)
        self.clock.now = 20.0
        self.assertIs(pipeline.get_alert_status().severity, Severity.ALERT)


if __name__ == "__main__":
    unittest.main()
