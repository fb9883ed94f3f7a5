from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException
from starlette.types import Scope

ENTRY_PAGE = "index.html"


def is_api_path(path: str) -> bool:
    return path == "api" or path.startswith("api/")


class SiteFiles(StaticFiles):
    """Public folder with a single-page fallback.

    Unknown paths get the entry page so client-side routing keeps working;
    unknown ``/api`` paths stay 404.
    """

    async def get_response(self, path: str, scope: Scope):
        try:
            return await super().get_response(path, scope)
        except HTTPException as e:
            if e.status_code != 404 or is_api_path(path.replace("\\", "/")):
                raise
        return await super().get_response(ENTRY_PAGE, scope)

    async def check_config(self) -> None:
        # Missing public folder: pages 404, the form API keeps working
        try:
            await super().check_config()
        except RuntimeError as e:
            raise HTTPException(status_code=404, detail="Site not found") from e
