"""
Resume Routes

GET /resumes/templates - Available resume templates
GET /resumes - Current user's resumes
POST /resumes - Create resume (with skills)
GET /resumes/{resume_id} - Own resume, or any public one
PUT /resumes/{resume_id} - Update own resume; skills list replaces the old one
DELETE /resumes/{resume_id} - Delete own resume
"""

import json
from typing import Dict, List

from fastapi import APIRouter, HTTPException, Depends
from sqlalchemy import text

from jobportal.db.postgres import get_db_session, execute_raw_sql
from jobportal.core.auth import protect
from jobportal.schemas.schemas import (
    ResumeCreate, ResumeUpdate, ResumeResponse, ResumeSkill, ResumeTemplateResponse, MessageResponse
)

router = APIRouter(prefix="/resumes", tags=["Resumes"])

RESUME_COLUMNS = "id, user_id, title, template, status, resume_data, is_public, created_at, updated_at"


def _skills_for(resume_ids: List[int]) -> Dict[int, List[ResumeSkill]]:
    if not resume_ids:
        return {}
    rows = execute_raw_sql("""
        SELECT rs.resume_id, s.name, rs.proficiency
        FROM resume_skills rs JOIN skills s ON rs.skill_id = s.id
        WHERE rs.resume_id = ANY(:ids)
        ORDER BY s.name
    """, {"ids": list(resume_ids)})
    skills: Dict[int, List[ResumeSkill]] = {}
    for r in rows:
        skills.setdefault(r["resume_id"], []).append(ResumeSkill(name=r["name"], proficiency=r["proficiency"]))
    return skills


def _to_response(row: dict, skills: List[ResumeSkill]) -> ResumeResponse:
    data = row["resume_data"]
    if isinstance(data, str):
        data = json.loads(data)
    return ResumeResponse(**{**row, "resume_data": data or {}}, skills=skills)


def _replace_skills(db, resume_id: int, skills: List[ResumeSkill]):
    db.execute(text("DELETE FROM resume_skills WHERE resume_id = :rid"), {"rid": resume_id})
    for skill in skills:
        skill_id = db.execute(
            text("""
                INSERT INTO skills (name, category) VALUES (:name, 'General')
                ON CONFLICT (name) DO UPDATE SET name = EXCLUDED.name
                RETURNING id
            """),
            {"name": skill.name.strip()}
        ).fetchone()[0]
        db.execute(
            text("""
                INSERT INTO resume_skills (resume_id, skill_id, proficiency)
                VALUES (:rid, :sid, :proficiency)
                ON CONFLICT (resume_id, skill_id) DO UPDATE SET proficiency = EXCLUDED.proficiency
            """),
            {"rid": resume_id, "sid": skill_id, "proficiency": skill.proficiency.value}
        )


def _get_own_resume(resume_id: int, user: dict) -> dict:
    rows = execute_raw_sql(f"SELECT {RESUME_COLUMNS} FROM resumes WHERE id = :rid", {"rid": resume_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Resume not found")
    if rows[0]["user_id"] != user["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to access this resume")
    return rows[0]


@router.get("/templates", response_model=List[ResumeTemplateResponse])
async def list_templates():
    """Resume templates, free ones first."""
    rows = execute_raw_sql("SELECT id, name, description, is_premium FROM resume_templates ORDER BY is_premium, name")
    return [ResumeTemplateResponse(**r) for r in rows]


@router.get("", response_model=List[ResumeResponse])
async def list_my_resumes(user: dict = Depends(protect)):
    rows = execute_raw_sql(
        f"SELECT {RESUME_COLUMNS} FROM resumes WHERE user_id = :uid ORDER BY updated_at DESC",
        {"uid": user["id"]}
    )
    skills = _skills_for([r["id"] for r in rows])
    return [_to_response(r, skills.get(r["id"], [])) for r in rows]


@router.post("", response_model=ResumeResponse, status_code=201)
async def create_resume(resume: ResumeCreate, user: dict = Depends(protect)):
    with get_db_session() as db:
        resume_id = db.execute(
            text("""
                INSERT INTO resumes (user_id, title, template, status, resume_data, is_public)
                VALUES (:uid, :title, :template, 'draft', CAST(:data AS JSONB), :is_public)
                RETURNING id
            """),
            {
                "uid": user["id"], "title": resume.title, "template": resume.template,
                "data": json.dumps(resume.resume_data), "is_public": resume.is_public
            }
        ).fetchone()[0]
        _replace_skills(db, resume_id, resume.skills)

    return await get_resume(resume_id, user)


@router.get("/{resume_id}", response_model=ResumeResponse)
async def get_resume(resume_id: int, user: dict = Depends(protect)):
    rows = execute_raw_sql(f"SELECT {RESUME_COLUMNS} FROM resumes WHERE id = :rid", {"rid": resume_id})
    if not rows:
        raise HTTPException(status_code=404, detail="Resume not found")
    row = rows[0]
    if row["user_id"] != user["id"] and not row["is_public"] and user["role"] != "admin":
        raise HTTPException(status_code=403, detail="Not authorized to access this resume")
    return _to_response(row, _skills_for([resume_id]).get(resume_id, []))


@router.put("/{resume_id}", response_model=ResumeResponse)
async def update_resume(resume_id: int, update: ResumeUpdate, user: dict = Depends(protect)):
    _get_own_resume(resume_id, user)

    changes = update.model_dump(
        exclude_unset=True, exclude_none=True, exclude={"skills", "resume_data"}, mode="json"
    )
    assignments = [f"{column} = :{column}" for column in changes]
    if update.resume_data is not None:
        assignments.append("resume_data = CAST(:resume_data AS JSONB)")
        changes["resume_data"] = json.dumps(update.resume_data)

    with get_db_session() as db:
        if assignments:
            db.execute(
                text(f"UPDATE resumes SET {', '.join(assignments)}, updated_at = CURRENT_TIMESTAMP WHERE id = :rid"),
                {**changes, "rid": resume_id}
            )
        if update.skills is not None:
            _replace_skills(db, resume_id, update.skills)

    return await get_resume(resume_id, user)


@router.delete("/{resume_id}", response_model=MessageResponse)
async def delete_resume(resume_id: int, user: dict = Depends(protect)):
    _get_own_resume(resume_id, user)
    execute_raw_sql("DELETE FROM resumes WHERE id = :rid RETURNING id", {"rid": resume_id})
    return MessageResponse(message="Resume deleted successfully")
