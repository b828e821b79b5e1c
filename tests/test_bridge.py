"""
Tests for the pywa bridge adapter.
"""
from types import SimpleNamespace

import pytest

from inbox.core.config import Settings
from inbox.services.bridge import WhatsAppBridge


class FakeWhatsApp:
    """Mimics the parts of pywa.WhatsApp the bridge touches"""

    def __init__(self):
        self.handlers = []
        self.sent = []

    def on_message(self, *filters):
        def decorator(func):
            self.handlers.append(func)
            return func
        return decorator

    def send_text(self, to, text):
        self.sent.append((to, text))
        return SimpleNamespace(id="wamid.1")

    def deliver(self, message):
        for handler in self.handlers:
            handler(self, message)


def _pywa_message(text="oi", wa_id="5511977776666", name="Dora"):
    return SimpleNamespace(
        from_user=SimpleNamespace(wa_id=wa_id, name=name),
        type="text",
        text=text,
        has_media=False,
    )


@pytest.fixture
def client():
    return FakeWhatsApp()


class TestWhatsAppBridge:

    def test_send_text(self, client):
        bridge = WhatsAppBridge(client)
        response = bridge.send_text("5511977776666", "hello")
        assert client.sent == [("5511977776666", "hello")]
        assert response.id == "wamid.1"

    def test_inbound_messages_are_decoded(self, client):
        bridge = WhatsAppBridge(client)
        received = []
        bridge.on_message(received.append)

        client.deliver(_pywa_message())

        assert len(received) == 1
        event = received[0]
        assert event.number == "5511977776666"
        assert event.contact_name == "Dora"
        assert event.content == "oi"

    def test_undecodable_message_is_skipped(self, client):
        bridge = WhatsAppBridge(client)
        received = []
        bridge.on_message(received.append)

        # `number` must be a string
        client.deliver(SimpleNamespace(from_user=SimpleNamespace(wa_id=None, name=object())))

        assert received == []

    def test_not_configured(self):
        class Unconfigured(Settings):
            PHONE_ID = ""
            TOKEN = ""

        assert WhatsAppBridge.from_settings(app=None, settings=Unconfigured()) is None
