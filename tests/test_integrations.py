#!/usr/bin/env python3
"""
External clients: credentials fail closed at call time, request shapes.
"""

import unittest
from unittest.mock import MagicMock, patch

import requests

from floresboxes.app.generate import GenerationClient
from floresboxes.errors import IntegrationError, IntegrationNotConfiguredError
from floresboxes.integrations.mailer import SmtpMailer
from floresboxes.integrations.mercadopago import MercadoPagoClient
from floresboxes.integrations.whatsapp import WhatsAppClient
from floresboxes.utils.security import mask_pii


def fake_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    response.text = text
    return response


class TestFailClosed(unittest.TestCase):
    def test_clients_construct_without_credentials(self):
        MercadoPagoClient(None)
        WhatsAppClient(None, None, None)
        SmtpMailer(None)
        GenerationClient(None)

    def test_missing_credentials_raise_on_call(self):
        with self.assertRaises(IntegrationNotConfiguredError):
            MercadoPagoClient(None).get_payment("1")
        with self.assertRaises(IntegrationNotConfiguredError):
            WhatsAppClient("AC1", "tok", None).send_message("whatsapp:+598", "hola")
        with self.assertRaises(IntegrationNotConfiguredError):
            SmtpMailer(None).send("a@example.com", "s", "<p>x</p>")
        with self.assertRaises(IntegrationNotConfiguredError) as ctx:
            GenerationClient(None).generate_reply("sys", [])
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))


class TestMercadoPagoClient(unittest.TestCase):
    def test_create_preference(self):
        http = MagicMock()
        http.request.return_value = fake_response(201, {"id": "pref-9", "init_point": "https://mp/9"})
        client = MercadoPagoClient("TEST-token", http=http)

        result = client.create_preference({"external_reference": "#0001"})

        self.assertEqual(result["id"], "pref-9")
        method, url = http.request.call_args.args
        self.assertEqual((method, url), ("POST", "https://api.mercadopago.com/checkout/preferences"))
        self.assertEqual(http.request.call_args.kwargs["headers"]["Authorization"], "Bearer TEST-token")

    def test_get_payment_error_status(self):
        http = MagicMock()
        http.request.return_value = fake_response(404, text='{"message":"Payment not found"}')
        client = MercadoPagoClient("TEST-token", http=http)

        with self.assertRaises(IntegrationError) as ctx:
            client.get_payment("123")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(http.request.call_args.args[1], "https://api.mercadopago.com/v1/payments/123")

    def test_network_error(self):
        http = MagicMock()
        http.request.side_effect = requests.exceptions.Timeout("timed out")

        with self.assertRaises(IntegrationError):
            MercadoPagoClient("TEST-token", http=http).get_payment("1")


class TestGenerationClient(unittest.TestCase):
    def test_payload_and_reply(self):
        http = MagicMock()
        http.post.return_value = fake_response(200, {"choices": [{"message": {"content": " ¡Hola! 🌸 "}}]})
        client = GenerationClient("sk-test", model="gpt-4o-mini", http=http)

        reply = client.generate_reply("SYSTEM", [{"role": "user", "content": "hola"}], max_tokens=500, temperature=0.7)

        self.assertEqual(reply, "¡Hola! 🌸")
        self.assertEqual(http.post.call_args.args[0], "https://api.openai.com/v1/chat/completions")
        payload = http.post.call_args.kwargs["json"]
        self.assertEqual(payload["messages"][0], {"role": "system", "content": "SYSTEM"})
        self.assertEqual(payload["messages"][1:], [{"role": "user", "content": "hola"}])
        self.assertEqual((payload["max_tokens"], payload["temperature"]), (500, 0.7))

    def test_unexpected_structure(self):
        http = MagicMock()
        http.post.return_value = fake_response(200, {"choices": []})

        with self.assertRaises(IntegrationError):
            GenerationClient("sk-test", http=http).generate_reply("SYSTEM", [])


class TestWhatsAppClient(unittest.TestCase):
    def test_send_message(self):
        http = MagicMock()
        http.post.return_value = fake_response(201, {"sid": "SM123"})
        client = WhatsAppClient("AC1", "tok", "whatsapp:+14155238886", http=http)

        sid = client.send_message("whatsapp:+59899123456", "¡Hola!")

        self.assertEqual(sid, "SM123")
        self.assertEqual(http.post.call_args.args[0], "https://api.twilio.com/2010-04-01/Accounts/AC1/Messages.json")
        self.assertEqual(http.post.call_args.kwargs["data"], {
            "From": "whatsapp:+14155238886", "To": "whatsapp:+59899123456", "Body": "¡Hola!",
        })
        self.assertEqual(http.post.call_args.kwargs["auth"], ("AC1", "tok"))


class TestSmtpMailer(unittest.TestCase):
    @patch("floresboxes.integrations.mailer.smtplib.SMTP")
    def test_send(self, smtp_cls):
        server = smtp_cls.return_value.__enter__.return_value
        mailer = SmtpMailer("smtp.brevo.com", 587, "shop@floresboxes.uy", "secret")

        mailer.send("ana@example.com", "Hola", "<p>hola</p>")

        smtp_cls.assert_called_once_with("smtp.brevo.com", 587, timeout=30)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("shop@floresboxes.uy", "secret")
        msg = server.send_message.call_args.args[0]
        self.assertEqual(msg["To"], "ana@example.com")
        self.assertIn("shop@floresboxes.uy", msg["From"])

    @patch("floresboxes.integrations.mailer.smtplib.SMTP")
    def test_smtp_error_is_wrapped(self, smtp_cls):
        smtp_cls.return_value.__enter__.return_value.send_message.side_effect = OSError("connection reset")

        with self.assertRaises(IntegrationError):
            SmtpMailer("smtp.brevo.com").send("ana@example.com", "Hola", "<p>hola</p>")


class TestMaskPii(unittest.TestCase):
    def test_masks_phone_and_email(self):
        self.assertEqual(mask_pii("whatsapp:+59899123456"), "whatsapp:[REDACTED]456")
        self.assertEqual(mask_pii("ana@example.com"), "a***@example.com")


if __name__ == '__main__':
    unittest.main()
