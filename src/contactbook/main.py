from fastapi import FastAPI, UploadFile, File, Depends, HTTPException, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from fastapi.responses import JSONResponse, HTMLResponse
from . import config
from .schemas import Contact, ContactUpdate, FavoriteUpdate
from .store import ContactStore
import base64
import logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Contactbook API")


def get_store(request: Request) -> ContactStore:
    return request.app.state.store


def _not_found():
    return HTTPException(status_code=404, detail="Contact not found")


def _reload(store: ContactStore, contact_id: str) -> Contact:
    # the row can be deleted between the update and this read
    contact = store.get(contact_id)
    if contact is None:
        raise _not_found()
    return contact


@app.on_event("startup")
def startup():
    config.configure_logging()
    app.state.store = ContactStore(config.DB_PATH, echo=config.SQL_ECHO)


@app.on_event("shutdown")
def shutdown():
    store = getattr(app.state, "store", None)
    if store is not None:
        store.close()


@app.exception_handler(SQLAlchemyError)
async def database_error(request: Request, exc: SQLAlchemyError):
    # the store has already logged the traceback
    return JSONResponse({"detail": "Database error"}, status_code=500)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/db_check")
def db_check(store: ContactStore = Depends(get_store)):
    try:
        with store.engine.connect() as conn:
            res = conn.execute(text("SELECT name FROM sqlite_master WHERE type='table' LIMIT 5"))
            tables = [r[0] for r in res]
        return {"ok": True, "db_path": store.db_path, "tables": tables}
    except SQLAlchemyError as e:
        logger.warning("db_check failed: %s", e)
        return JSONResponse({"ok": False, "error": str(e)})


@app.get("/")
def index():
    return HTMLResponse(
        "<html><body><h1>Contactbook</h1>"
        "<p>Sample contacts application saving its data in a sqlite database.</p>"
        "</body></html>"
    )


@app.get("/contacts", response_model=list[Contact])
def list_contacts(store: ContactStore = Depends(get_store)):
    return store.list()


@app.post("/contacts", response_model=Contact, status_code=201)
def create_contact(store: ContactStore = Depends(get_store)):
    return store.create_empty()


@app.get("/contacts/{contact_id}", response_model=Contact)
def get_contact(contact_id: str, store: ContactStore = Depends(get_store)):
    contact = store.get(contact_id)
    if contact is None:
        raise _not_found()
    return contact


@app.patch("/contacts/{contact_id}", response_model=Contact)
def update_contact(contact_id: str, changes: ContactUpdate, store: ContactStore = Depends(get_store)):
    if not store.update(contact_id, changes):
        raise _not_found()
    return _reload(store, contact_id)


@app.post("/contacts/{contact_id}/favorite", response_model=Contact)
def set_favorite(contact_id: str, body: FavoriteUpdate, store: ContactStore = Depends(get_store)):
    if not store.update(contact_id, ContactUpdate(favorite=body.favorite)):
        raise _not_found()
    return _reload(store, contact_id)


@app.post("/contacts/{contact_id}/avatar", response_model=Contact)
async def upload_avatar(contact_id: str, file: UploadFile = File(...), store: ContactStore = Depends(get_store)):
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Avatar must be an image")
    content = await file.read()
    if len(content) > config.MAX_AVATAR_BYTES:
        raise HTTPException(status_code=413, detail="Avatar too large")
    # stored inline as a data URL so it can be used directly as an <img> src
    avatar = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
    if not store.update(contact_id, ContactUpdate(avatar=avatar)):
        raise _not_found()
    return _reload(store, contact_id)


@app.delete("/contacts/{contact_id}")
def delete_contact(contact_id: str, store: ContactStore = Depends(get_store)):
    deleted = store.delete(contact_id)
    return {"ok": True, "deleted": deleted}
