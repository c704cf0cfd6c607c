"""Lead capture and segmentation."""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..data.database import Database
from ..data.models import Lead, utcnow
from ..errors import DuplicateLeadError
from ..utils.logger import get_logger
from ..utils.security import mask_pii

logger = get_logger("leads")

BUYER_TAG = "buyer"


def in_segment(lead: Lead, segment: Optional[str]) -> bool:
    """``buyers`` have the buyer tag, ``new`` lack it; anything else matches all."""
    is_buyer = BUYER_TAG in (lead.tags or [])
    if segment == "buyers":
        return is_buyer
    if segment == "new":
        return not is_buyer
    return True


class LeadService:
    def __init__(self, db: Database):
        self.db = db

    def upsert(self, email: str, name: Optional[str], source: str, tags: Optional[List[str]] = None) -> Lead:
        """Create or overwrite the lead keyed by ``email``.

        Name and source are always replaced. Given ``tags`` replace the stored
        ones without merging; ``None`` leaves them as they are.
        """
        try:
            with self.db.session() as s:
                lead = s.scalar(select(Lead).where(Lead.email == email))
                if lead is None:
                    lead = Lead(email=email, tags=[], created_at=utcnow())
                    s.add(lead)
                lead.name = name
                lead.source = source
                if tags is not None:
                    lead.tags = list(tags)
        except IntegrityError as e:
            raise DuplicateLeadError(email) from e

        logger.info("Upserted lead %s source=%s tags=%s", mask_pii(email), source, lead.tags)
        return lead

    def find(self, email: str) -> Optional[Lead]:
        with self.db.session() as s:
            return s.scalar(select(Lead).where(Lead.email == email))

    def list_all(self) -> List[Lead]:
        with self.db.session() as s:
            return list(s.scalars(select(Lead).order_by(Lead.created_at.desc(), Lead.id.desc())))

    def segment(self, segment: Optional[str]) -> List[Lead]:
        with self.db.session() as s:
            leads = list(s.scalars(select(Lead).order_by(Lead.id)))
        return [lead for lead in leads if in_segment(lead, segment)]
