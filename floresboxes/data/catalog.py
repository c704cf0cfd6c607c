"""Static product catalog.

Used for grounding the WhatsApp assistant; checkout prices come from the
storefront payload.
"""
from typing import Dict, List, Optional

PRODUCTS = [
    {"name": "Ramo Primaveral", "price": 890, "emoji": "💐"},
    {"name": "Box Romántica", "price": 1590, "emoji": "💝"},
    {"name": "12 Rosas Rojas", "price": 1290, "emoji": "🌹"},
    {"name": "Box Spa & Relax", "price": 1890, "emoji": "🧴"},
    {"name": "Girasoles Alegres", "price": 790, "emoji": "🌻"},
    {"name": "Rosas Eternas Lila", "price": 2490, "emoji": "🌸"},
]


class Catalog:
    def __init__(self, frontend_url: str = "", products: Optional[List[Dict]] = None):
        self.frontend_url = (frontend_url or "").rstrip("/")
        self.products = [dict(p) for p in (products if products is not None else PRODUCTS)]
        for p in self.products:
            p.setdefault("url", f"{self.frontend_url}/#productos")

    def list_all_items(self) -> List[Dict]:
        return list(self.products)

