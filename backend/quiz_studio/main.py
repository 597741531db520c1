# FastAPI app, routes, and error rendering.
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quiz_studio.auth import AuthService
from quiz_studio.config import (
    GROQ_API_KEY_ENV_VAR,
    configure_logging,
    get_ai_api_key,
    get_cors_origins,
)
from quiz_studio.dependencies import (
    admin_only,
    authenticated,
    get_auth_service,
    get_quiz_store,
    public,
)
from quiz_studio.errors import Forbidden, ValidationFailed
from quiz_studio.models import utcnow
from quiz_studio.quiz_generation import generate_questions
from quiz_studio.quiz_store import InMemoryQuizStore, QuizRepository
from quiz_studio.schemas import (
    AuthOut,
    GenerateQuestionsIn,
    GenerateQuestionsOut,
    HealthOut,
    LoginIn,
    MessageOut,
    QuizCreate,
    QuizOut,
    QuizPlayOut,
    QuizResultOut,
    QuizUpdate,
    RefreshIn,
    RefreshOut,
    RegisterIn,
    SubmitIn,
    UserActiveIn,
    UserOut,
)
from quiz_studio.scoring import score
from quiz_studio.tokens import TokenPayload, TokenService
from quiz_studio.users import InMemoryUserDirectory


# Build fresh process-local stores and the token service on startup.
@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    app.state.users = InMemoryUserDirectory()
    app.state.quizzes = InMemoryQuizStore()
    app.state.tokens = TokenService.from_config()
    if not get_ai_api_key():
        logger.warning(
            "%s is not configured, AI question generation will fail",
            GROQ_API_KEY_ENV_VAR,
        )
    yield


app = FastAPI(title="Quiz Studio API", lifespan=lifespan)
logger = logging.getLogger("quiz_studio")

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def render_validation_failure(error: ValidationFailed) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"detail": error.detail, "errors": error.errors},
    )


# Request-schema failures are 400s with per-field messages.
@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError):
    return render_validation_failure(ValidationFailed.from_errors(exc.errors()))


@app.exception_handler(ValidationFailed)
async def handle_validation_failed(request: Request, exc: ValidationFailed):
    return render_validation_failure(exc)


def ensure_owner(quizzes: QuizRepository, quiz_id: int, user: TokenPayload, action: str):
    if not quizzes.is_owner(quiz_id, user.sub):
        logger.warning("User %s tried to %s quiz %s", user.sub, action, quiz_id)
        raise Forbidden(f"you are not allowed to {action} this quiz")


@app.get("/health", response_model=HealthOut, dependencies=[Depends(public)])
def health():
    return HealthOut(status="ok", timestamp=utcnow())


@app.post(
    "/auth/register",
    response_model=AuthOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(public)],
)
def register(payload: RegisterIn, auth: AuthService = Depends(get_auth_service)):
    return auth.register(payload.email, payload.password, payload.username)


@app.post("/auth/login", response_model=AuthOut, dependencies=[Depends(public)])
def login(payload: LoginIn, auth: AuthService = Depends(get_auth_service)):
    return auth.login(payload.email, payload.password)


@app.post("/auth/refresh", response_model=RefreshOut, dependencies=[Depends(public)])
def refresh(payload: RefreshIn, auth: AuthService = Depends(get_auth_service)):
    return auth.refresh(payload.refresh_token)


# Tokens are stateless: logging out means the client discards them.
@app.post("/auth/logout", response_model=MessageOut)
def logout(user: TokenPayload = Depends(authenticated)):
    logger.info("User %s logged out", user.sub)
    return MessageOut(message="logged out")


@app.get("/auth/me", response_model=UserOut)
def me(
    user: TokenPayload = Depends(authenticated),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.get_current_user(user.sub)


@app.get("/users", response_model=List[UserOut])
def list_users(
    user: TokenPayload = Depends(admin_only),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.list_users()


@app.put("/users/{user_id}/active", response_model=UserOut)
def set_user_active(
    user_id: str,
    payload: UserActiveIn,
    user: TokenPayload = Depends(admin_only),
    auth: AuthService = Depends(get_auth_service),
):
    return auth.set_user_active(user_id, payload.is_active)


@app.post("/quizzes", response_model=QuizOut, status_code=status.HTTP_201_CREATED)
def create_quiz(
    payload: QuizCreate,
    user: TokenPayload = Depends(authenticated),
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    return quizzes.create(payload.model_dump(), author_id=user.sub)


@app.get("/quizzes", response_model=List[QuizOut], dependencies=[Depends(public)])
def list_published_quizzes(quizzes: QuizRepository = Depends(get_quiz_store)):
    return quizzes.find_published()


@app.get("/quizzes/mine", response_model=List[QuizOut])
def list_my_quizzes(
    user: TokenPayload = Depends(authenticated),
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    return quizzes.find_by_author(user.sub)


@app.get("/quizzes/all", response_model=List[QuizOut])
def list_all_quizzes(
    user: TokenPayload = Depends(authenticated),
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    return quizzes.find_all()


@app.post(
    "/quizzes/generate-questions",
    response_model=GenerateQuestionsOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(public)],
)
def create_generated_questions(payload: GenerateQuestionsIn):
    return GenerateQuestionsOut(
        questions=generate_questions(payload.theme, payload.count)
    )


@app.get("/quizzes/{quiz_id}", response_model=QuizOut, dependencies=[Depends(public)])
def get_quiz(quiz_id: int, quizzes: QuizRepository = Depends(get_quiz_store)):
    return quizzes.find_one(quiz_id)


# Return the quiz without answer keys for playing.
@app.get(
    "/quizzes/{quiz_id}/play",
    response_model=QuizPlayOut,
    dependencies=[Depends(public)],
)
def get_quiz_for_play(quiz_id: int, quizzes: QuizRepository = Depends(get_quiz_store)):
    return quizzes.find_one_for_play(quiz_id)


@app.post(
    "/quizzes/{quiz_id}/submit",
    response_model=QuizResultOut,
    dependencies=[Depends(public)],
)
def submit_quiz(
    quiz_id: int,
    payload: SubmitIn,
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    return score(quizzes.find_one(quiz_id), payload.answers)


@app.put("/quizzes/{quiz_id}", response_model=QuizOut)
def update_quiz(
    quiz_id: int,
    payload: QuizUpdate,
    user: TokenPayload = Depends(authenticated),
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    ensure_owner(quizzes, quiz_id, user, "update")
    return quizzes.update(quiz_id, payload.model_dump(exclude_unset=True))


@app.delete("/quizzes/{quiz_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    quiz_id: int,
    user: TokenPayload = Depends(authenticated),
    quizzes: QuizRepository = Depends(get_quiz_store),
):
    ensure_owner(quizzes, quiz_id, user, "delete")
    quizzes.remove(quiz_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
