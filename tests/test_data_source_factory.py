import unittest

from barometer.config import Settings
from barometer.data_sources import oref_client, openweather_client, polymarket_client
from barometer.data_sources.base import CallableFeedSource
from barometer.data_sources.factory import build_feed_source


class DummyResp:
    status_code = 200
    ok = True
    content = b"[]"
    text = "[]"
    encoding = None
    url = "http://upstream"

    def __init__(self, payload=None):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


class RecordingSession:
    def __init__(self, payload=None):
        self.payload = payload
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return DummyResp(self.payload)


class TestDataSourceFactory(unittest.TestCase):
    def setUp(self):
        self._orig = (oref_client.session, polymarket_client.session, openweather_client.session)

    def tearDown(self):
        oref_client.session, polymarket_client.session, openweather_client.session = self._orig

    def test_build_returns_callable_source(self):
        ds = build_feed_source(Settings())
        self.assertIsInstance(ds, CallableFeedSource)

    def test_clients_bound_to_settings(self):
        settings = Settings(
            alert_feed_url="http://alerts.local/feed/",
            polymarket_events_url="http://gamma.local/events",
            polymarket_slug="some-slug",
            openweather_url="http://owm.local/forecast",
            openweather_api_key="abc",
            weather_latitude=1.5,
            weather_longitude=2.5,
            weather_forecast_count=4,
            http_timeout_seconds=2.5,
        )
        oref_client.session = RecordingSession()
        polymarket_client.session = RecordingSession([])
        openweather_client.session = RecordingSession({"list": []})

        ds = build_feed_source(settings)
        ds.fetch_alerts()
        ds.fetch_market_event()
        ds.fetch_forecast()

        url, kwargs = oref_client.session.calls[0]
        self.assertEqual(url, "http://alerts.local/feed")
        self.assertEqual(kwargs["timeout"], 2.5)

        url, kwargs = polymarket_client.session.calls[0]
        self.assertEqual(url, "http://gamma.local/events")
        self.assertEqual(kwargs["params"], {"slug": "some-slug"})

        url, kwargs = openweather_client.session.calls[0]
        self.assertEqual(url, "http://owm.local/forecast")
        self.assertEqual(kwargs["params"]["appid"], "abc")
        self.assertEqual(kwargs["params"]["cnt"], 4)
        self.assertEqual((kwargs["params"]["lat"], kwargs["params"]["lon"]), (1.5, 2.5))


if __name__ == "__main__":
    unittest.main()
