#!/usr/bin/env python3
"""
Transactional and campaign email for the storefront.

Templates are plain HTML strings; every customer-supplied value goes through
``html.escape`` before it is interpolated.
"""

from html import escape
from typing import Iterable, Optional, Tuple

from ..data.models import Lead, Order
from ..errors import IntegrationNotConfiguredError
from ..integrations.mailer import SmtpMailer
from ..utils.logger import get_logger

logger = get_logger("notifications")

BRAND = "Flores&Boxes"
WELCOME_CODE = "BIENVENIDA10"
WHATSAPP_CONTACT_URL = "https://wa.me/59899000000"


def format_money(value: float) -> str:
    """``1590`` -> ``1,590``; keeps cents only when there are some."""
    if float(value).is_integer():
        return f"{value:,.0f}"
    return f"{value:,.2f}"


def _e(value: Optional[object]) -> str:
    return escape(str(value)) if value is not None else ""


class NotificationDispatcher:
    """Formats and sends the four kinds of email the shop sends."""

    def __init__(self, mailer: SmtpMailer, admin_email: Optional[str] = None, frontend_url: str = ""):
        self.mailer = mailer
        self.admin_email = admin_email
        self.frontend_url = frontend_url or ""

    # ----- order confirmation -----

    def render_order_confirmation(self, order: Order) -> Tuple[str, str]:
        customer = order.customer or {}
        items_html = "".join(
            f"<tr><td>{_e(i.get('emoji') or '')} {_e(i.get('name'))}</td>"
            f"<td>x{_e(i.get('qty'))}</td>"
            f"<td>${format_money(i.get('price', 0) * i.get('qty', 0))} UYU</td></tr>"
            for i in order.items or []
        )
        shipping = "Gratis 🎉" if order.shipping == 0 else f"${format_money(order.shipping)} UYU"
        card_message = ""
        if customer.get("message"):
            card_message = f'<p>💌 Mensaje en tarjeta: "{_e(customer.get("message"))}"</p>'

        subject = f"🌸 ¡Pedido confirmado! {order.order_id} - {BRAND}"
        html = f"""
      <div style="font-family:sans-serif;max-width:600px;margin:0 auto;background:#FDF0F3;border-radius:20px;overflow:hidden;">
        <div style="background:#C4607A;padding:32px;text-align:center;">
          <h1 style="color:white;font-size:28px;margin:0;">🌸 ¡Gracias, {_e(customer.get('name'))}!</h1>
          <p style="color:rgba(255,255,255,0.85);margin-top:8px;">Tu pedido fue confirmado</p>
        </div>
        <div style="padding:32px;">
          <p>Tu pedido <strong>{_e(order.order_id)}</strong> está en preparación con todo nuestro amor 💐</p>
          <h3 style="margin:24px 0 12px;">📦 Detalle del pedido</h3>
          <table style="width:100%;border-collapse:collapse;">
            <thead><tr style="background:#FDE8EE;"><th style="padding:10px;text-align:left;">Producto</th><th>Cant.</th><th>Precio</th></tr></thead>
            <tbody>{items_html}</tbody>
          </table>
          <div style="margin-top:20px;padding:16px;background:white;border-radius:12px;">
            <div><span>Subtotal</span> <strong>${format_money(order.subtotal)} UYU</strong></div>
            <div><span>Envío</span> <strong>{shipping}</strong></div>
            <div style="font-size:18px;font-weight:700;color:#C4607A;"><span>Total</span> <span>${format_money(order.total)} UYU</span></div>
          </div>
          <div style="margin-top:20px;padding:16px;background:white;border-radius:12px;">
            <h4 style="margin-bottom:8px;">🚚 Datos de entrega</h4>
            <p>{_e(customer.get('address'))}, {_e(customer.get('barrio'))}</p>
            <p>Fecha: {_e(customer.get('deliveryDate'))}</p>
            {card_message}
          </div>
          <div style="margin-top:28px;text-align:center;">
            <a href="{WHATSAPP_CONTACT_URL}" style="background:#25D366;color:white;padding:12px 28px;border-radius:50px;text-decoration:none;font-weight:600;">💬 Consultar por WhatsApp</a>
          </div>
        </div>
        <div style="background:#2C2020;padding:20px;text-align:center;color:rgba(255,255,255,0.5);font-size:12px;">
          © {BRAND} · Montevideo, UY
        </div>
      </div>
    """
        return subject, html

    def send_order_confirmation(self, order: Order) -> None:
        subject, html = self.render_order_confirmation(order)
        self.mailer.send((order.customer or {}).get("email"), subject, html, from_name=BRAND)

    # ----- admin alert -----

    def render_admin_alert(self, order: Order) -> Tuple[str, str]:
        customer = order.customer or {}
        products = ", ".join(f"{i.get('name')} x{i.get('qty')}" for i in order.items or [])
        subject = f"🛒 Nuevo pedido {order.order_id} - ${format_money(order.total)} UYU"
        html = f"""
      <h2>Nuevo pedido recibido</h2>
      <p><strong>Cliente:</strong> {_e(customer.get('name'))} ({_e(customer.get('email'))})</p>
      <p><strong>Teléfono:</strong> {_e(customer.get('phone'))}</p>
      <p><strong>Total:</strong> ${format_money(order.total)} UYU</p>
      <p><strong>Método de pago:</strong> {_e(order.payment_method)}</p>
      <p><strong>Entrega:</strong> {_e(customer.get('address'))}, {_e(customer.get('barrio'))} - {_e(customer.get('deliveryDate'))}</p>
      <p><strong>Productos:</strong> {_e(products)}</p>
    """
        return subject, html

    def notify_admin(self, order: Order) -> None:
        if not self.admin_email:
            raise IntegrationNotConfiguredError("Admin notifications", "ADMIN_EMAIL")
        subject, html = self.render_admin_alert(order)
        self.mailer.send(self.admin_email, subject, html, from_name=f"{BRAND} Sistema")

    # ----- welcome -----

    def render_welcome(self, name: Optional[str]) -> Tuple[str, str]:
        subject = f"🌸 ¡Bienvenida a {BRAND}!"
        html = f"""
        <div style="font-family:sans-serif;max-width:500px;margin:0 auto;">
          <div style="background:#C4607A;padding:28px;text-align:center;border-radius:20px 20px 0 0;">
            <h1 style="color:white;margin:0;">🌸 ¡Hola, {_e(name or '')}!</h1>
          </div>
          <div style="padding:28px;background:#FDF0F3;border-radius:0 0 20px 20px;">
            <p>Gracias por suscribirte. Pronto recibirás nuestras mejores ofertas y novedades.</p>
            <p style="margin-top:16px;">Como bienvenida, acá te dejamos <strong>10% OFF en tu primera compra</strong> con el código:</p>
            <div style="background:white;padding:16px;border-radius:12px;text-align:center;margin:20px 0;">
              <span style="font-size:24px;font-weight:700;color:#C4607A;letter-spacing:3px;">{WELCOME_CODE}</span>
            </div>
            <a href="{_e(self.frontend_url)}" style="display:block;background:#C4607A;color:white;text-align:center;padding:14px;border-radius:50px;text-decoration:none;font-weight:600;">Ver productos</a>
          </div>
        </div>
      """
        return subject, html

    def send_welcome(self, lead: Lead) -> None:
        subject, html = self.render_welcome(lead.name)
        self.mailer.send(lead.email, subject, html, from_name=BRAND)

    # ----- campaign -----

    def send_campaign(self, leads: Iterable[Lead], subject: str, html: str) -> int:
        """Send one message per lead, in order.

        The first failing send propagates and the remaining leads are skipped;
        the count of messages already sent is lost with it.
        """
        sent = 0
        for lead in leads:
            self.mailer.send(lead.email, subject, html, from_name=BRAND)
            sent += 1
        logger.info("Campaign '%s' sent to %d leads", subject, sent)
        return sent
