"""FastAPI application for SkillSync Brain - resume vs job description skill gap analytics API."""
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response
from typing import Any, Dict, Optional
from loguru import logger

from skillsync.analytics import (
    AnalyticsAggregator,
    SkillGapRecorder,
    company_readiness,
    fetch_export_rows,
    generate_student_id,
    rows_to_csv,
)
from skillsync.core.config import Settings, settings
from skillsync.core.database import Database, PersistenceError
from skillsync.core.schemas import (
    AnalyticsFilter,
    AnalyzeRequest,
    ExplainSkillRequest,
    LoginRequest,
    RegisterRequest,
    Submission,
)
from skillsync.core.security import (
    create_access_token,
    get_current_user,
    hash_password,
    require_admin,
    verify_password,
)
from skillsync.jd_parser.jd_extractor import extract_company_name, extract_job_role
from skillsync.llm_engine import AIServiceError, GeminiClient, analyze_resume, explain_skill
from skillsync.utils.date_utils import utc_now

# Configure logging
logger.add(settings.LOG_FILE, rotation="10 MB", level=settings.LOG_LEVEL)


def _public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": user["id"],
        "email": user["email"],
        "fullName": user["full_name"],
        "role": user["role"],
        "department": user.get("department"),
        "university": user.get("university"),
    }


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_ai_client(request: Request) -> Optional[Any]:
    return request.app.state.ai_client


def create_app(app_settings: Optional[Settings] = None, ai_client: Optional[Any] = None) -> FastAPI:
    """Build the API. The database handle and AI client are created once at
    startup and shared through ``app.state``."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="SkillSync Brain - Skill Gap Analytics API",
        version="1.0.0",
        description="""
    ## Resume vs Job Description skill gap analysis

    - Students submit a resume and a job description → AI match + missing skills
    - Every analysis is recorded and feeds per-skill and weekly trend counters
    - Admins read aggregate analytics, alerts and CSV/JSON exports
    """,
    )
    app.state.settings = app_settings
    app.state.db = Database.from_settings(app_settings)
    app.state.ai_client = ai_client

    @app.on_event("startup")
    async def startup_event():
        """Bootstrap the schema and the AI client."""
        logger.info("Starting SkillSync Brain service...")
        app.state.db.init_schema()
        if app.state.ai_client is None:
            app.state.ai_client = GeminiClient.from_settings(app_settings)
            if app.state.ai_client is not None and app_settings.GEMINI_PROBE_ON_STARTUP:
                app.state.ai_client.probe_models()
        if app_settings.JWT_SECRET == Settings.model_fields["JWT_SECRET"].default:
            logger.warning("JWT_SECRET is the built-in default; set it in .env for production")
        logger.info("Database backend: {}", app.state.db.backend)

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.ai_client = None
        logger.info("SkillSync Brain service stopped")

    @app.get("/", include_in_schema=False)
    def root():
        """Redirect root to API documentation immediately."""
        return RedirectResponse(url="/docs", status_code=307)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @app.post("/api/auth/register")
    def register(payload: RegisterRequest = Body(...), db: Database = Depends(get_db)):
        if not payload.email or not payload.password or not payload.full_name:
            raise HTTPException(status_code=400, detail="Email, password, and full name are required")
        try:
            if db.get_user_by_email(payload.email):
                raise HTTPException(status_code=400, detail="User with this email already exists")
            user = db.create_user(
                email=payload.email,
                password_hash=hash_password(payload.password),
                full_name=payload.full_name,
                university=payload.university,
                department=payload.department,
                academic_year=payload.academic_year,
                student_id=payload.student_id,
                phone=payload.phone,
            )
        except HTTPException:
            raise
        except Exception:
            logger.exception("Registration failed")
            raise HTTPException(status_code=500, detail="Registration failed")

        token = create_access_token(user, app_settings.JWT_SECRET, app_settings.JWT_EXPIRE_HOURS)
        return {
            "success": True,
            "message": "Registration successful",
            "token": token,
            "user": {k: v for k, v in _public_user(user).items() if k in ("id", "email", "fullName", "role")},
        }

    @app.post("/api/auth/login")
    def login(payload: LoginRequest = Body(...), db: Database = Depends(get_db)):
        if not payload.email or not payload.password:
            raise HTTPException(status_code=400, detail="Email and password are required")
        try:
            user = db.get_user_by_email(payload.email)
            if not user or not verify_password(payload.password, user["password"]):
                raise HTTPException(status_code=401, detail="Invalid email or password")
            db.touch_last_login(user["id"])
        except HTTPException:
            raise
        except Exception:
            logger.exception("Login failed")
            raise HTTPException(status_code=500, detail="Login failed")

        token = create_access_token(user, app_settings.JWT_SECRET, app_settings.JWT_EXPIRE_HOURS)
        logger.info("User id={} logged in", user["id"])
        return {"success": True, "message": "Login successful", "token": token, "user": _public_user(user)}

    @app.post("/api/auth/logout")
    def logout():
        response = JSONResponse(content={"success": True, "message": "Logged out successfully"})
        response.delete_cookie("token")
        return response

    @app.get("/api/auth/me")
    def me(current_user: Dict[str, Any] = Depends(get_current_user), db: Database = Depends(get_db)):
        user = db.get_user_by_id(current_user["id"])
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return {"success": True, "user": _public_user(user)}

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    @app.post("/api/analyze")
    def analyze(
        payload: AnalyzeRequest = Body(...),
        current_user: Dict[str, Any] = Depends(get_current_user),
        db: Database = Depends(get_db),
        ai_client: Optional[Any] = Depends(get_ai_client),
    ):
        """
        # Analyze a resume against a job description

        The AI result is recorded for analytics and returned as is
        (`matchPercentage`, `missingSkills`, `matchedSkills`, `skillPriority`,
        `skillExplanations`, `recommendations`).
        """
        resume_text = (payload.resume_text or "").strip()
        job_description = (payload.job_description or "").strip()
        if not resume_text or not job_description:
            raise HTTPException(status_code=400, detail="Resume text and job description are required")

        try:
            result = analyze_resume(ai_client, resume_text, job_description)
            submission = Submission(
                user_id=current_user.get("id"),
                student_id=generate_student_id(payload.student_name, utc_now()),
                student_name=payload.student_name or "Anonymous",
                department=payload.department or "Unknown",
                academic_year=payload.academic_year or "Not Specified",
                job_role=extract_job_role(job_description),
                company_name=payload.company_name or extract_company_name(job_description),
                result=result,
            )
            SkillGapRecorder(db).record(submission)
        except AIServiceError as exc:
            logger.error("Analysis failed upstream: {}", exc)
            raise HTTPException(status_code=exc.status_code, detail=f"Analysis failed: {exc.message}")
        except PersistenceError as exc:
            raise HTTPException(status_code=500, detail=f"Analysis failed: {exc}")
        except Exception as exc:
            logger.exception("Analysis processing failed")
            raise HTTPException(status_code=500, detail=f"Analysis failed: {str(exc)}")

        return JSONResponse(content=result.model_dump(mode="json", by_alias=True))

    @app.post("/api/explain-skill")
    def explain(payload: ExplainSkillRequest = Body(...), ai_client: Optional[Any] = Depends(get_ai_client)):
        skill = (payload.skill or "").strip()
        if not skill:
            raise HTTPException(status_code=400, detail="Skill name required")
        try:
            explanation = explain_skill(ai_client, skill)
        except AIServiceError as exc:
            raise HTTPException(status_code=exc.status_code, detail=f"Failed to generate explanation: {exc.message}")
        return {"skill": skill, "explanation": explanation}

    # ------------------------------------------------------------------
    # Analytics
    # ------------------------------------------------------------------

    @app.get("/api/analytics")
    def analytics(
        department: Optional[str] = Query(None),
        academic_year: Optional[str] = Query(None, alias="academicYear"),
        _admin: Dict[str, Any] = Depends(require_admin),
        db: Database = Depends(get_db),
    ):
        filters = AnalyticsFilter(department=department, academic_year=academic_year)
        return AnalyticsAggregator(db).aggregate(filters)

    @app.get("/api/export")
    def export(
        format: Optional[str] = Query(None),
        department: Optional[str] = Query(None),
        academic_year: Optional[str] = Query(None, alias="academicYear"),
        _admin: Dict[str, Any] = Depends(require_admin),
        db: Database = Depends(get_db),
    ):
        filters = AnalyticsFilter(department=department, academic_year=academic_year)
        try:
            rows = fetch_export_rows(db, filters)
        except Exception:
            logger.exception("Export failed")
            raise HTTPException(status_code=500, detail="Export failed")

        if (format or "").lower() == "csv":
            return Response(
                content=rows_to_csv(rows),
                media_type="text/csv",
                headers={"Content-Disposition": "attachment; filename=skillsync_export.csv"},
            )
        return {"data": rows, "total": len(rows)}

    @app.get("/api/company-readiness/{company}")
    def readiness(company: str, _admin: Dict[str, Any] = Depends(require_admin), db: Database = Depends(get_db)):
        try:
            return company_readiness(db, company)
        except Exception:
            logger.exception("Company readiness failed for {}", company)
            raise HTTPException(status_code=500, detail="Failed to analyze company readiness")

    @app.get("/api/departments")
    def departments(db: Database = Depends(get_db)):
        try:
            return {"departments": db.list_departments()}
        except Exception:
            logger.exception("Failed to fetch departments")
            raise HTTPException(status_code=500, detail="Failed to fetch departments")

    @app.get("/api/academic-years")
    def academic_years(db: Database = Depends(get_db)):
        try:
            return {"years": db.list_academic_years()}
        except Exception:
            logger.exception("Failed to fetch academic years")
            raise HTTPException(status_code=500, detail="Failed to fetch academic years")

    @app.get("/api/health")
    def health(request: Request):
        return {
            "status": "ok",
            "gemini": request.app.state.ai_client is not None,
            "database": request.app.state.db.backend,
            "timestamp": utc_now().isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
