"""FastAPI server for the StitchPix try-on studio.

A browser front end drives one studio through these endpoints:
- auth: signup / login / logout against the StitchPix backend
- photos: base64 data URLs of the face photo and the garment photo
- tryon: run the selected model, with canvas fallback
"""

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from stitchpix.config import load_config
from stitchpix.errors import AuthError, GenerationError, StudioBusyError, ValidationError
from stitchpix.logging_config import setup_logging
from stitchpix.studio import PhotoRole, TryOnStudio


app = FastAPI(
    title="StitchPix API",
    description="Virtual try-on studio with canvas fallback",
    version="1.0.0",
)

# Enable CORS for the browser front end
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class SignupRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class CredentialRequest(BaseModel):
    credential: str | None = None


class PhotoRequest(BaseModel):
    """A photo as a base64 data URL."""
    role: PhotoRole
    photo: str


class TryOnRequest(BaseModel):
    model_id: str | None = None


class AuthResponse(BaseModel):
    success: bool
    user: dict | None = None
    error: str | None = None


class PhotoResponse(BaseModel):
    success: bool
    width: int | None = None
    height: int | None = None
    error: str | None = None


class TryOnResponse(BaseModel):
    """Response with the generated image."""
    success: bool
    image_url: str | None = None
    label: str | None = None
    source: str | None = None
    advisory: str | None = None
    error: str | None = None


# Initialize studio (will be done on first request)
_studio: TryOnStudio | None = None


def get_studio() -> TryOnStudio:
    """Get or create the studio instance."""
    global _studio
    if _studio is None:
        config = load_config()  # Loads from .env automatically via pydantic-settings
        setup_logging(config.log_level, config.json_logs)
        _studio = TryOnStudio.from_config(config)
        _studio.hydrate()
    return _studio


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "StitchPix Try-On API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Studio status."""
    studio = get_studio()
    return {
        "status": "ok",
        "page": studio.page.value,
        "authenticated": studio.session.is_authenticated,
        "credential_configured": bool(studio.session.credential),
    }


@app.get("/api/models")
async def list_models():
    """Selectable models grouped by tier."""
    studio = get_studio()
    return {
        "selected": studio.selected_model.id,
        "tiers": {
            tier.value: [descriptor.model_dump(mode="json") for descriptor in descriptors]
            for tier, descriptors in studio.registry.grouped().items()
        },
    }


@app.post("/api/auth/signup", response_model=AuthResponse)
async def signup(request: SignupRequest):
    studio = get_studio()
    try:
        auth = await studio.signup(request.name, request.email, request.password)
    except (AuthError, StudioBusyError) as e:
        return AuthResponse(success=False, error=e.message)
    return AuthResponse(success=True, user=auth.user.model_dump())


@app.post("/api/auth/login", response_model=AuthResponse)
async def login(request: LoginRequest):
    studio = get_studio()
    try:
        auth = await studio.login(request.email, request.password)
    except (AuthError, StudioBusyError) as e:
        return AuthResponse(success=False, error=e.message)
    return AuthResponse(success=True, user=auth.user.model_dump())


@app.post("/api/auth/logout")
async def logout():
    get_studio().logout()
    return {"success": True}


@app.put("/api/credential")
async def set_credential(request: CredentialRequest):
    studio = get_studio()
    studio.set_credential(request.credential)
    return {"success": True, "credential_configured": bool(studio.session.credential)}


@app.post("/api/photos", response_model=PhotoResponse)
async def upload_photo(request: PhotoRequest):
    studio = get_studio()
    try:
        image = studio.upload_photo(request.role, request.photo)
    except ValidationError as e:
        return PhotoResponse(success=False, error=e.reason)
    return PhotoResponse(success=True, width=image.width, height=image.height)


@app.post("/api/tryon", response_model=TryOnResponse)
async def generate_tryon(request: TryOnRequest):
    """Generate a try-on image with the selected (or given) model.

    A failed remote model still succeeds through the canvas fallback; the
    provider error is returned as ``advisory``.
    """
    studio = get_studio()
    if request.model_id is not None:
        studio.select_model(request.model_id)

    try:
        outcome = await studio.generate()
    except (GenerationError, StudioBusyError) as e:
        return TryOnResponse(success=False, error=e.message)

    if outcome is None:
        return TryOnResponse(success=False, error="Generation was cancelled")

    return TryOnResponse(
        success=True,
        image_url=outcome.result.url,
        label=outcome.result.label,
        source=outcome.result.source.value,
        advisory=outcome.advisory,
    )


@app.post("/api/reset")
async def reset():
    get_studio().reset()
    return {"success": True}


@app.get("/api/result")
async def download_result():
    """Current result as image bytes, or a redirect target for remote ones."""
    result = get_studio().result
    if result is None:
        raise HTTPException(status_code=404, detail="No result yet")
    if not result.is_local:
        return {"url": result.url}
    return Response(
        content=result.image.data,  # type: ignore[union-attr]
        media_type=result.image.mime_type,  # type: ignore[union-attr]
        headers={"Content-Disposition": 'attachment; filename="stitchpix-result.png"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
