from fastapi import APIRouter, Depends, File, UploadFile

from dependencies import get_storage_manager
from models.user import User
from schemas.base import SuccessResponse
from schemas.upload import UploadedImage
from services import upload as upload_service
from storage.base import BaseStorage
from utils.auth import get_current_user

router = APIRouter(prefix="/api/upload", tags=["upload"])

UPLOAD_FOLDER = "blog"


@router.post("", response_model=SuccessResponse[UploadedImage])
def upload_image(
    image: UploadFile = File(None),
    current_user: User = Depends(get_current_user),
    storage: BaseStorage = Depends(get_storage_manager),
):
    return {"success": True, "data": upload_service.store_image(storage, image, folder=UPLOAD_FOLDER)}


@router.delete("/{public_id:path}", response_model=SuccessResponse[dict])
def delete_image(
    public_id: str,
    current_user: User = Depends(get_current_user),
    storage: BaseStorage = Depends(get_storage_manager),
):
    upload_service.delete_image(storage, public_id)
    return {"success": True, "data": {}}
