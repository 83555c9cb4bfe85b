import asyncio

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse

from drive_relay.config import settings  # loads .env via BaseSettings
from drive_relay.application.auth_flow import build_authorization_url, exchange_code_for_token
from drive_relay.application.exceptions import ApplicationError
from drive_relay.application.upload_service import handle_upload
from drive_relay.infrastructure.log_utils import log_message

app = FastAPI(title="Drive Relay")


def _http_error(exc: Exception, context: str) -> HTTPException:
    """Log a failure and translate it into the status code of its error class."""
    if isinstance(exc, ApplicationError):
        log_message(f"{context}: {type(exc).__name__}: {exc}", "ERROR")
        return HTTPException(status_code=exc.status_code, detail=f"{type(exc).__name__}: {exc.public_message}")

    log_message(f"{context}: unexpected {type(exc).__name__}: {exc}", "ERROR", exc_info=True)
    return HTTPException(status_code=500, detail=f"{context}.")


# Upload form
@app.get("/")
def index():
    return FileResponse(settings.index_path, media_type="text/html")


@app.post("/upload", response_class=PlainTextResponse)
def upload(file: UploadFile = File(...)):
    """
    Stage the uploaded file, push it to Google Drive and greet the account owner.
    The staged copy is removed whether or not the transfer succeeds.
    """
    try:
        result = handle_upload(file.file, file.filename)
    except Exception as exc:
        raise _http_error(exc, "Error uploading file")
    finally:
        file.file.close()

    return result.message()


@app.get("/authenticate")
async def authenticate():
    """Redirect the browser to Google's consent screen after a short pause."""
    try:
        auth_url = build_authorization_url()
    except Exception as exc:
        raise _http_error(exc, "Error building authorization URL")

    log_message(f"Redirecting to authorization URL: {auth_url}", "INFO")
    await asyncio.sleep(settings.AUTH_REDIRECT_DELAY_SECONDS)
    return RedirectResponse(auth_url, status_code=302)


@app.get("/googleCallback", response_class=PlainTextResponse)
def google_callback(code: str | None = Query(None, description="Authorization code from Google.")):
    """Exchange the authorization code for a token and store it in token.json."""
    log_message(f"OAuth callback received (code present: {bool(code)}).", "INFO")

    try:
        exchange_code_for_token(code)
    except Exception as exc:
        raise _http_error(exc, "Error exchanging authorization code")

    return "OK."
