from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.core.database import get_db
from app.schemas.contact import ProUserResponse
from app.services import directory

router = APIRouter(tags=["Pro users"])


@router.get("/pro-users", response_model=List[ProUserResponse])
def list_pro_users(db: Session = Depends(get_db)):
    # Public listing; the response model leaves out credentials and OTP state
    return directory.list_pro_users(db)
