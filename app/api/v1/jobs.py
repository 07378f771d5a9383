"""Job endpoints - Track, search and import job applications.

Every query is scoped to the authenticated user's jobs.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.config import settings
from app.models.job import Job
from app.models.user import User
from app.schemas.job import (
    JobCreate,
    JobImportResponse,
    JobListResponse,
    JobResponse,
    JobStatsResponse,
    JobUpdate,
)
from app.utils.constants import DEFAULT_JOB_STATUS
from app.utils.helpers import normalize_pagination, total_pages
from app.utils.job_parser import CSVImportError, parse_jobs_csv
from app.utils.validators import validate_file_extension

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_DETAIL = "Job not found or not authorized"


async def _get_owned_job(db: AsyncSession, job_id: int, user_id: int) -> Job:
    result = await db.execute(select(Job).where(Job.id == job_id, Job.user_id == user_id))
    job = result.scalar_one_or_none()
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    return job


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    job_in: JobCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a job application for the current user."""
    job = Job(
        user_id=current_user.id,
        company=job_in.company,
        role=job_in.role,
        status=job_in.status or DEFAULT_JOB_STATUS,
        deadline=job_in.deadline,
        applied_through=job_in.applied_through,
        interview_date=job_in.interview_date,
    )
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job


@router.get("/", response_model=JobListResponse)
async def list_jobs(
    company: Optional[str] = Query(None, description="Filter by company (partial match)"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by exact status"),
    q: Optional[str] = Query(None, description="Search company or role"),
    page: Optional[int] = Query(1, description="Page number (values below 1 become 1)"),
    limit: Optional[int] = Query(None, description="Items per page (1-100, otherwise 20)"),
    sort_by: str = Query("deadline", description="Sort by field (deadline, created_at)"),
    sort_order: str = Query("asc", description="Sort order (asc, desc)"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Get the current user's jobs with search, filter, sort and pagination.

    **Filters:**
    - `company`: case-insensitive partial match
    - `status`: exact match (Applied, Interview, Offer, Rejected, ...)
    - `q`: case-insensitive partial match on company or role

    **Sorting:**
    - `sort_by`: deadline (default; jobs without a deadline last) or created_at
    - `sort_order`: asc (default) or desc
    """
    filters = [Job.user_id == current_user.id]

    if company:
        filters.append(Job.company.ilike(f"%{company}%"))

    if status_filter:
        filters.append(Job.status == status_filter)

    if q:
        filters.append(or_(Job.company.ilike(f"%{q}%"), Job.role.ilike(f"%{q}%")))

    paging = normalize_pagination(page, limit)
    descending = sort_order.lower() == "desc"

    if sort_by == "created_at":
        sort_column = Job.created_at.desc() if descending else Job.created_at.asc()
        order_clause = [sort_column, Job.id]
    else:
        sort_column = Job.deadline.desc() if descending else Job.deadline.asc()
        order_clause = [Job.deadline.is_(None), sort_column, Job.id]

    total = (
        await db.execute(select(func.count(Job.id)).where(*filters))
    ).scalar_one()

    result = await db.execute(
        select(Job)
        .where(*filters)
        .order_by(*order_clause)
        .limit(paging["limit"])
        .offset(paging["offset"])
    )
    jobs = result.scalars().all()

    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        total=total,
        page=paging["page"],
        limit=paging["limit"],
        total_pages=total_pages(total, paging["limit"]),
    )


@router.get("/stats", response_model=JobStatsResponse)
async def job_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Count the current user's jobs per status (for the progress bar)."""
    result = await db.execute(
        select(Job.status, func.count(Job.id))
        .where(Job.user_id == current_user.id)
        .group_by(Job.status)
    )
    return JobStatsResponse(stats={row[0]: row[1] for row in result.all()})


@router.post("/import", response_model=JobImportResponse)
async def import_jobs(
    file: Optional[UploadFile] = File(None, description="CSV file (form-data key 'file')"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Bulk import jobs from a CSV file.

    Columns: company, role, status, deadline, applied_through, interview_date.
    Dates use YYYY-MM-DD. Rows without company or role are skipped.
    """
    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV file is required (form-data, key=file)",
        )

    if not validate_file_extension(file.filename, ["csv", "txt"]):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only .csv files are accepted",
        )

    content = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if len(content) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large (max {settings.MAX_UPLOAD_SIZE} bytes)",
        )

    try:
        parsed = parse_jobs_csv(content)
    except CSVImportError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"CSV parse error: {e}",
        )

    if not parsed.rows:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="CSV is empty or invalid headers",
        )

    db.add_all([Job(user_id=current_user.id, **row) for row in parsed.rows])
    await db.commit()

    logger.info(
        f"Imported {len(parsed.rows)} jobs for user {current_user.id} "
        f"(skipped rows: {parsed.skipped_rows or 'none'})"
    )

    return JobImportResponse(
        message="Import successful",
        inserted_rows=len(parsed.rows),
        skipped_rows=len(parsed.skipped_rows),
    )


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get one of the current user's jobs."""
    return await _get_owned_job(db, job_id, current_user.id)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    job_update: JobUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Update a job. Only the fields sent in the request are changed.

    The reminder flag is not touched, so changing the deadline of a job that
    was already reminded does not trigger a second reminder.
    """
    fields = job_update.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    for required in ("company", "role", "status"):
        if required in fields and fields[required] is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{required} cannot be empty",
            )

    job = await _get_owned_job(db, job_id, current_user.id)
    for name, value in fields.items():
        setattr(job, name, value)

    await db.commit()
    await db.refresh(job)
    return job


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete one of the current user's jobs."""
    result = await db.execute(
        delete(Job).where(Job.id == job_id, Job.user_id == current_user.id)
    )
    if result.rowcount == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)
    await db.commit()
    return {"message": "Job deleted successfully"}
