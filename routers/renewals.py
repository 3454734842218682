# routers/renewals.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from schemas.renewal import RenewalOfferDecision, RenewalOfferResponse
from services.lease_service import LeaseService
from services.notification_service import NotificationDispatcher
from services.renewal_service import get_renewal_offers, respond_to_renewal_offer

router = APIRouter(prefix="/api/renewal-offers", tags=["renewals"])


@router.get("", response_model=List[RenewalOfferResponse], summary="Renewal offers for a lease")
def list_renewal_offers(lease_id: str = Query(...), db: Session = Depends(get_session)):
     LeaseService.get_lease(db, lease_id)
     return get_renewal_offers(db, lease_id)


@router.post("/{offer_id}/respond", response_model=RenewalOfferResponse, summary="Accept or decline an offer")
def respond_to_offer(offer_id: str, body: RenewalOfferDecision, db: Session = Depends(get_session)):
     """Record the tenant's decision. Only pending offers can be answered."""
     offer = respond_to_renewal_offer(db, offer_id, body.accept, notifier=NotificationDispatcher(db))
     db.commit()
     return offer
