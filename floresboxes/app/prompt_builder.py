#!/usr/bin/env python3
"""
Prompt builder module for the WhatsApp assistant.

This module constructs the system prompt from the product catalog and the
store's delivery and payment policy.
"""

from ..data.catalog import Catalog

class PromptBuilder:
    """Builds the fixed system instruction sent ahead of every conversation."""

    POLICY = """Información importante:
- Envíos el mismo día en Montevideo
- Envío gratis para pedidos +${free_shipping} UYU
- Pagamos con MercadoPago, tarjeta de crédito y débito
- Entregamos de lunes a sábado de 9:00 a 19:00"""

    RULES = """Reglas:
1. Siempre respondé en español rioplatense con vos y voseo
2. Usá emojis 🌸💐🌹
3. Cuando alguien quiera comprar o preguntar por un producto específico, dales el link del producto
4. Si necesitan envío urgente, pediles dirección y acordá el horario
5. Sé cálida, amable y entusiasta
6. Si no podés resolver algo, deciles que los llamará un humano"""

    def __init__(self, catalog: Catalog, free_shipping_threshold: float = 2000):
        """Initialize the prompt builder."""
        self.catalog = catalog
        self.free_shipping_threshold = free_shipping_threshold
        self.system_prompt = self._build_system_prompt()

    def _build_system_prompt(self) -> str:
        products = "\n".join(
            f"- {p['emoji']} {p['name']}: ${p['price']} UYU - Link: {p['url']}"
            for p in self.catalog.list_all_items()
        )
        policy = self.POLICY.replace("{free_shipping}", f"{self.free_shipping_threshold:,.0f}".replace(",", "."))
        return (
            "Sos la asistente de Flores&Boxes, una floristería en Montevideo, Uruguay 🌸\n"
            "Atendés por WhatsApp para ayudar a elegir flores y regalos especiales.\n\n"
            f"Nuestros productos:\n{products}\n\n"
            f"{policy}\n\n"
            f"{self.RULES}"
        )
