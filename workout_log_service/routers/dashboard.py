import datetime as dt
from pathlib import Path

import structlog
from fastapi import APIRouter, Depends, Form, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..config import get_settings
from ..date_utils import format_input_date, format_standard_date
from ..dependencies import get_optional_user_id, get_workout_actions, get_workout_queries
from ..services.view_invalidation import DASHBOARD_PATH
from ..services.workout_actions import WorkoutActions
from ..services.workout_queries import WorkoutQueries

logger = structlog.get_logger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))
templates.env.filters["standard_date"] = format_standard_date
templates.env.filters["input_date"] = format_input_date

router = APIRouter()


def _sign_in_redirect() -> RedirectResponse:
    return RedirectResponse(get_settings().SIGN_IN_URL, status_code=status.HTTP_303_SEE_OTHER)


def _dashboard_redirect(day: dt.date | None = None) -> RedirectResponse:
    url = DASHBOARD_PATH if day is None else f"{DASHBOARD_PATH}?date={format_input_date(day)}"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/sign-in", response_class=HTMLResponse)
async def sign_in(request: Request):
    return templates.TemplateResponse(request, "sign_in.html", {})


@router.get(DASHBOARD_PATH, response_class=HTMLResponse)
async def dashboard(
    request: Request,
    date: str | None = Query(None),
    user_id: str | None = Depends(get_optional_user_id),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    if not user_id:
        return _sign_in_redirect()
    selected, workouts = await queries.workouts_for_day(user_id, date)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "workouts": workouts,
            "selected_date": selected,
            "previous_date": selected - dt.timedelta(days=1),
            "next_date": selected + dt.timedelta(days=1),
        },
    )


@router.get(DASHBOARD_PATH + "/workout/new", response_class=HTMLResponse)
async def new_workout_page(
    request: Request,
    date: str | None = Query(None),
    user_id: str | None = Depends(get_optional_user_id),
):
    if not user_id:
        return _sign_in_redirect()
    return templates.TemplateResponse(
        request,
        "workout_form.html",
        {"workout": None, "form": {"date": date or format_input_date(dt.date.today())}},
    )


@router.post(DASHBOARD_PATH + "/workout/new", response_class=HTMLResponse)
async def create_workout_form(
    request: Request,
    name: str = Form(""),
    date: str = Form(""),
    notes: str = Form(""),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    form = {"name": name, "date": date, "notes": notes}
    result = await actions.create_workout(user_id, form)
    if result.ok:
        return _dashboard_redirect(result.value.date.date())
    if not user_id:
        return _sign_in_redirect()
    return templates.TemplateResponse(
        request,
        "workout_form.html",
        {"workout": None, "form": form, "error": result.error, "field_errors": result.field_errors or {}},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@router.get(DASHBOARD_PATH + "/workout/{workout_id}", response_class=HTMLResponse)
async def edit_workout_page(
    request: Request,
    workout_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    if not user_id:
        return _sign_in_redirect()
    workout = await queries.workout(user_id, workout_id)
    if workout is None:
        return _dashboard_redirect()
    form = {"name": workout.name, "date": format_input_date(workout.date), "notes": workout.notes or ""}
    return templates.TemplateResponse(request, "workout_form.html", {"workout": workout, "form": form})


@router.post(DASHBOARD_PATH + "/workout/{workout_id}", response_class=HTMLResponse)
async def update_workout_form(
    request: Request,
    workout_id: str,
    name: str = Form(""),
    date: str = Form(""),
    notes: str = Form(""),
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    form = {"name": name, "date": date, "notes": notes}
    result = await actions.update_workout(user_id, {"id": workout_id, **form})
    if result.ok:
        return _dashboard_redirect(result.value.date.date())
    if not user_id:
        return _sign_in_redirect()
    workout = await queries.workout(user_id, workout_id)
    if workout is None:
        return _dashboard_redirect()
    return templates.TemplateResponse(
        request,
        "workout_form.html",
        {"workout": workout, "form": form, "error": result.error, "field_errors": result.field_errors or {}},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@router.get(DASHBOARD_PATH + "/workout/{workout_id}/details", response_class=HTMLResponse)
async def workout_detail_page(
    request: Request,
    workout_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    queries: WorkoutQueries = Depends(get_workout_queries),
):
    if not user_id:
        return _sign_in_redirect()
    workout = await queries.workout_detail(user_id, workout_id)
    if workout is None:
        return _dashboard_redirect()
    return templates.TemplateResponse(request, "workout_detail.html", {"workout": workout})


@router.post(DASHBOARD_PATH + "/workout/{workout_id}/delete")
async def delete_workout_form(
    workout_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    actions: WorkoutActions = Depends(get_workout_actions),
):
    if not user_id:
        return _sign_in_redirect()
    result = await actions.delete_workout(user_id, {"id": workout_id})
    if not result.ok:
        logger.info("workout_delete_form_rejected", user_id=user_id, error=result.error)
    return _dashboard_redirect()
