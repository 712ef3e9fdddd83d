"""Home, help, and about routes."""

from xitzin import Request, Xitzin

from ..engine.commands import HELP_TEXT
from ..engine.parser import get_valid_verbs


def register_routes(app: Xitzin) -> None:
    """Register pages that need no certificate."""

    @app.gemini("/", name="home")
    def home(request: Request):
        return app.template("home.gmi")

    @app.gemini("/help", name="help")
    def help_page(request: Request):
        return app.template(
            "help.gmi", help_text=HELP_TEXT, verbs=get_valid_verbs(),
        )

    @app.gemini("/about", name="about")
    def about(request: Request):
        return app.template("about.gmi")
