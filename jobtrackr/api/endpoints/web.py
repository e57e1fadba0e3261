"""Web routes for HTML pages: login, register, dashboard, forms, detail view."""

import logging
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session

from jobtrackr.api.endpoints.auth import clear_session_cookie, set_session_cookie
from jobtrackr.core.config import settings
from jobtrackr.core.database import get_db
from jobtrackr.core.deps import get_optional_user, require_user
from jobtrackr.crud import application as application_crud
from jobtrackr.models.application import Application, ApplicationStatus, ContractType
from jobtrackr.models.user import User
from jobtrackr.schemas.application import ApplicationPayload
from jobtrackr.schemas.user import LoginRequest, RegisterRequest
from jobtrackr.services import auth_service
from jobtrackr.services.tracker_view import (
    DASHBOARD_STATUSES,
    add_tag,
    dashboard_stats,
    filter_applications,
    remove_tag,
    split_tags,
    status_progress,
)

router = APIRouter(include_in_schema=False)
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent.parent / "templates"))
logger = logging.getLogger(__name__)

CONTRACT_TYPES = [c.value for c in ContractType]
STATUS_OPTIONS = [s.value for s in ApplicationStatus]
CONTACT_METHODS = [("linkedin", "LinkedIn"), ("email", "Email"), ("website", "Site web")]
DEFAULT_TAGS = ["React", "Node.js", "Paris"]

# Messages for the error codes the OAuth callback puts in /login?error=
LOGIN_ERRORS = {
    "OAuthCallback": "La connexion avec Google a échoué. Réessayez.",
    "OAuthAccountNotLinked": "Cet email est déjà associé à un compte. Connectez-vous avec votre mot de passe.",
    "AccessDenied": "Accès refusé.",
    "CredentialsSignin": "Identifiants invalides",
    "Configuration": "La connexion avec Google n'est pas configurée.",
}
DEFAULT_LOGIN_ERROR = "Une erreur est survenue lors de la connexion."

# Registration form messages, keyed by the RegisterRequest field that failed
REGISTER_ERRORS = {
    "email": "Email invalide",
    "password": "Le mot de passe doit contenir entre 6 et 72 caractères",
    "name": "Nom trop long",
    "default": "Données d'inscription invalides",
}

FORM_FIELDS = (
    "company", "position", "contract", "status", "link",
    "contact_name", "contact_email", "contact_phone", "notes", "applied_at",
)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _empty_draft() -> dict:
    return {
        "company": "",
        "position": "",
        "contract": ContractType.CDI.value,
        "status": ApplicationStatus.TODO.value,
        "link": "",
        "contact_method": "linkedin",
        "contact_name": "",
        "contact_email": "",
        "contact_phone": "",
        "tags": list(DEFAULT_TAGS),
        "new_tag": "",
        "notes": "",
        "applied_at": date.today().isoformat(),
    }


def _draft_from_application(application: Application) -> dict:
    draft = _empty_draft()
    for name in FORM_FIELDS:
        draft[name] = getattr(application, name) or ""
    draft["applied_at"] = application.applied_at.date().isoformat()
    draft["tags"] = split_tags(application.tags)
    return draft


def read_application_form(
    company: str = Form(""),
    position: str = Form(""),
    contract: str = Form(""),
    status: str = Form(""),
    link: str = Form(""),
    contact_method: str = Form("linkedin"),
    contact_name: str = Form(""),
    contact_email: str = Form(""),
    contact_phone: str = Form(""),
    notes: str = Form(""),
    applied_at: str = Form(""),
    tags: List[str] = Form([]),
    new_tag: str = Form(""),
    action: str = Form("save"),
) -> Tuple[dict, str]:
    """Read the submitted form into a draft, returning it with the button pressed."""
    draft = _empty_draft()
    submitted = {
        "company": company,
        "position": position,
        "contract": contract,
        "status": status,
        "link": link,
        "contact_name": contact_name,
        "contact_email": contact_email,
        "contact_phone": contact_phone,
        "notes": notes,
        "applied_at": applied_at,
    }
    for name in FORM_FIELDS:
        draft[name] = submitted[name].strip()
    draft["contact_method"] = contact_method or "linkedin"
    draft["tags"] = [tag for tag in tags if tag]
    draft["new_tag"] = new_tag.strip()
    return draft, action or "save"


def _apply_draft_action(draft: dict, action: str) -> bool:
    """
    Handle the tag buttons of the form.

    Returns True when the draft was edited in place and the form should be
    shown again instead of saved.
    """
    if action == "add_tag":
        draft["tags"] = add_tag(draft["tags"], draft["new_tag"])
        draft["new_tag"] = ""
        return True
    if action.startswith("remove_tag:"):
        try:
            index = int(action.split(":", 1)[1])
        except ValueError:
            return True
        draft["tags"] = remove_tag(draft["tags"], index)
        return True
    return False


def _payload_from_draft(draft: dict) -> ApplicationPayload:
    values = {name: (draft[name] or None) for name in FORM_FIELDS}
    values["tags"] = draft["tags"]
    return ApplicationPayload(**values)


def _render_form(request: Request, user: User, draft: dict, mode: str,
                 application_id: Optional[str] = None, error: Optional[str] = None,
                 status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "application_form.html",
        {
            "current_user": user,
            "draft": draft,
            "mode": mode,
            "application_id": application_id,
            "contract_types": CONTRACT_TYPES,
            "status_options": STATUS_OPTIONS,
            "contact_methods": CONTACT_METHODS,
            "error": error,
        },
        status_code=status_code,
    )


def _render_not_found(request: Request, user: User) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "not_found.html",
        {"current_user": user},
        status_code=status.HTTP_404_NOT_FOUND,
    )


def _render_login(request: Request, error: Optional[str] = None, email: str = "",
                  registered: bool = False, status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "current_user": None,
            "error": error,
            "registered": registered,
            "google_enabled": settings.google_enabled,
            "email": email,
        },
        status_code=status_code,
    )


@router.get("/")
def home(user: Optional[User] = Depends(get_optional_user)):
    return _redirect("/dashboard" if user else "/login")


@router.get("/login", response_class=HTMLResponse)
def login_page(
    request: Request,
    error: Optional[str] = None,
    registered: Optional[str] = None,
    user: Optional[User] = Depends(get_optional_user),
):
    if user:
        return _redirect("/dashboard")
    return _render_login(
        request,
        error=LOGIN_ERRORS.get(error, DEFAULT_LOGIN_ERROR) if error else None,
        registered=registered == "true",
    )


@router.post("/login", response_class=HTMLResponse)
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Credentials sign-in; same input rules as POST /api/auth/login."""
    try:
        credentials = LoginRequest(email=email.strip(), password=password)
        user = auth_service.authenticate(db, credentials.email, credentials.password)
    except (ValidationError, auth_service.InvalidCredentials):
        return _render_login(
            request,
            error=LOGIN_ERRORS["CredentialsSignin"],
            email=email.strip(),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    response = _redirect("/dashboard")
    set_session_cookie(response, auth_service.issue_session_token(user))
    return response


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request, user: Optional[User] = Depends(get_optional_user)):
    if user:
        return _redirect("/dashboard")
    return templates.TemplateResponse(
        request,
        "register.html",
        {"current_user": None, "error": None, "form": {"name": "", "email": ""}},
    )


def _registration_error(exc: ValidationError) -> str:
    """French message for the first field RegisterRequest rejected."""
    field = exc.errors()[0]["loc"][0] if exc.errors() else None
    return REGISTER_ERRORS.get(field, REGISTER_ERRORS["default"])


@router.post("/register", response_class=HTMLResponse)
def register_submit(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    """Registration form; validated with the same schema as POST /api/register."""
    name = name.strip()
    email = email.strip()
    ctx = {"current_user": None, "error": None, "form": {"name": name, "email": email}}

    if not email or not password:
        ctx["error"] = "Email et mot de passe requis"
    elif len(password) < 6:
        ctx["error"] = "Le mot de passe doit contenir au moins 6 caractères"
    else:
        try:
            data = RegisterRequest(name=name or None, email=email, password=password)
            auth_service.register(db, email=data.email, password=data.password, name=data.name)
            return _redirect("/login?registered=true")
        except ValidationError as e:
            ctx["error"] = _registration_error(e)
        except auth_service.EmailAlreadyRegistered:
            ctx["error"] = "Email déjà utilisé"
        except Exception:
            db.rollback()
            logger.exception(f"Error registering {email} from the web form")
            ctx["error"] = "Une erreur est survenue lors de l'inscription"

    return templates.TemplateResponse(request, "register.html", ctx, status_code=status.HTTP_400_BAD_REQUEST)


@router.post("/logout")
def logout():
    response = _redirect("/login")
    clear_session_cookie(response)
    return response


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(
    request: Request,
    q: str = "",
    status_filter: str = Query("", alias="status"),
    error: Optional[str] = None,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Dashboard: counts, search/status filter and the applications table."""
    applications = application_crud.list_for_user(db, user.id)

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "current_user": user,
            "applications": filter_applications(applications, q, status_filter),
            "stats": dashboard_stats(applications),
            "dashboard_statuses": DASHBOARD_STATUSES,
            "status_options": STATUS_OPTIONS,
            "q": q,
            "status_filter": status_filter,
            "delete_failed": error == "delete",
        },
    )


@router.post("/dashboard/{application_id}/delete")
def delete_from_dashboard(
    application_id: str,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        deleted = application_crud.delete_owned(db, application_id, user.id)
    except Exception:
        db.rollback()
        logger.exception(f"Error deleting application {application_id} from the dashboard")
        deleted = False

    if not deleted:
        return _redirect("/dashboard?" + urlencode({"error": "delete"}))

    logger.info(f"Deleted application {application_id} for user {user.id}")
    return _redirect("/dashboard")


@router.get("/dashboard/new", response_class=HTMLResponse)
def new_application_page(request: Request, user: User = Depends(require_user)):
    return _render_form(request, user, _empty_draft(), mode="create")


@router.post("/dashboard/new", response_class=HTMLResponse)
def new_application_submit(
    request: Request,
    form: Tuple[dict, str] = Depends(read_application_form),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    draft, action = form
    if _apply_draft_action(draft, action):
        return _render_form(request, user, draft, mode="create")

    try:
        application = application_crud.create(db, user.id, _payload_from_draft(draft))
    except ValidationError:
        return _render_form(request, user, draft, mode="create",
                            error="Erreur lors de l'envoi de la candidature",
                            status_code=status.HTTP_400_BAD_REQUEST)
    except Exception:
        db.rollback()
        logger.exception(f"Error creating application from the web form for user {user.id}")
        return _render_form(request, user, draft, mode="create",
                            error="Erreur lors de l'envoi de la candidature",
                            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    logger.info(f"Created application {application.id} for user {user.id}: {application.company}")
    return _redirect("/dashboard")


@router.get("/dashboard/edit/{application_id}", response_class=HTMLResponse)
def edit_application_page(
    application_id: str,
    request: Request,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    application = application_crud.get_owned(db, application_id, user.id)
    if not application:
        return _render_not_found(request, user)
    return _render_form(request, user, _draft_from_application(application),
                        mode="edit", application_id=application_id)


@router.post("/dashboard/edit/{application_id}", response_class=HTMLResponse)
def edit_application_submit(
    application_id: str,
    request: Request,
    form: Tuple[dict, str] = Depends(read_application_form),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    draft, action = form
    if _apply_draft_action(draft, action):
        return _render_form(request, user, draft, mode="edit", application_id=application_id)

    try:
        application = application_crud.update_owned(db, application_id, user.id, _payload_from_draft(draft))
    except ValidationError:
        return _render_form(request, user, draft, mode="edit", application_id=application_id,
                            error="Erreur lors de la mise à jour de la candidature",
                            status_code=status.HTTP_400_BAD_REQUEST)
    except Exception:
        db.rollback()
        logger.exception(f"Error updating application {application_id} from the web form")
        return _render_form(request, user, draft, mode="edit", application_id=application_id,
                            error="Erreur lors de la mise à jour de la candidature",
                            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if not application:
        return _render_not_found(request, user)

    return _redirect(f"/dashboard/view/{application_id}")


@router.get("/dashboard/view/{application_id}", response_class=HTMLResponse)
def application_detail(
    application_id: str,
    request: Request,
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Detail page with the status progress bar."""
    application = application_crud.get_owned(db, application_id, user.id)
    if not application:
        return _render_not_found(request, user)

    return templates.TemplateResponse(
        request,
        "application_detail.html",
        {
            "current_user": user,
            "application": application,
            "tags": split_tags(application.tags),
            "progress": status_progress(application.status),
        },
    )
