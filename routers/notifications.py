# routers/notifications.py
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_session
from schemas.notification import NotificationPreferences, NotificationResponse
from services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse], summary="List a user's notifications")
def list_notifications(
     user_id: str = Query(...),
     unread_only: bool = Query(False),
     limit: int = Query(50, ge=1, le=200),
     db: Session = Depends(get_session)
):
     return NotificationDispatcher(db).get_notifications(user_id, unread_only=unread_only, limit=limit)


@router.post("/read-all", summary="Mark all notifications as read")
def mark_all_read(user_id: str = Query(...), db: Session = Depends(get_session)):
     count = NotificationDispatcher(db).mark_all_as_read(user_id)
     db.commit()
     return {"updated": count}


@router.post("/{notification_id}/read", response_model=NotificationResponse, summary="Mark a notification as read")
def mark_read(notification_id: str, user_id: str = Query(...), db: Session = Depends(get_session)):
     notification = NotificationDispatcher(db).mark_as_read(notification_id, user_id)
     db.commit()
     return notification


@router.get("/preferences/{user_id}", response_model=NotificationPreferences, summary="Delivery preferences")
def read_preferences(user_id: str, db: Session = Depends(get_session)):
     return NotificationDispatcher(db).get_preferences(user_id)


@router.put("/preferences/{user_id}", response_model=NotificationPreferences, summary="Update delivery preferences")
def update_preferences(user_id: str, body: NotificationPreferences, db: Session = Depends(get_session)):
     NotificationDispatcher(db).update_preferences(user_id, body)
     db.commit()
     return body
