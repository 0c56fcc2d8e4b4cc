from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from typing import List, Optional
import logging
from storage.local import LocalUploadStore
from . import schema

logger = logging.getLogger(__name__)

# Dependencies: storage handles live on app.state, set up by the application lifespan
def require_ready(request: Request):
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Service not ready")

def get_repository(request: Request):
    return request.app.state.repository

def get_upload_store(request: Request) -> LocalUploadStore:
    return request.app.state.upload_store

router = APIRouter(
    tags=["submissions"],
    dependencies=[Depends(require_ready)]
)

@router.get("/submissions", response_model=List[schema.SubmissionResponse])
def list_submissions(repository=Depends(get_repository)):
    """Get all submissions, newest first"""
    try:
        return repository.list_all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching submissions: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch submissions"
        )

@router.post("/submit", response_model=schema.SubmitResponse)
def submit_form(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    repository=Depends(get_repository),
    upload_store: LocalUploadStore = Depends(get_upload_store)
):
    """Store a form submission with an optional image"""
    # Presence check only, nothing is stored for an incomplete form
    if not (name and name.strip()) or not (email and email.strip()) or not (message and message.strip()):
        raise HTTPException(status_code=400, detail="Name, email and message are required")

    try:
        image_ref = upload_store.save(image)
        submission_id = repository.create(name, email, message, image_ref)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error submitting form: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit form"
        )

    logger.info(f"Submission {submission_id} received from {email}")
    return {
        "message": "Submission received successfully",
        "data": {"name": name, "email": email, "message": message, "image": image_ref}
    }

@router.delete("/submissions/{submission_id}", response_model=schema.MessageResponse)
def delete_submission(
    submission_id: int,
    repository=Depends(get_repository),
    upload_store: LocalUploadStore = Depends(get_upload_store)
):
    """Delete a submission and its stored image. Unknown ids are treated as already deleted."""
    try:
        image_ref = repository.find_image_by_id(submission_id)
        if image_ref:
            upload_store.delete(image_ref)

        if not repository.delete_by_id(submission_id):
            logger.info(f"Submission {submission_id} not found, nothing to delete")
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Error deleting submission {submission_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete submission"
        )

    return {"message": "Submission deleted successfully"}
