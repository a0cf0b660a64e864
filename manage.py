from typing import Annotated, Optional

from rich import print
import typer
import uvicorn

from authglue.core.config import get_settings

app = typer.Typer()


@app.command()
def runserver(
    host: Annotated[
        Optional[str], typer.Option(help="Interface to bind. Defaults to HOST.")
    ] = None,
    port: Annotated[
        Optional[int], typer.Option(help="Port to listen on. Defaults to PORT.")
    ] = None,
):
    """
    Run the login service with uvicorn.

    Reloads on code changes when DEBUG is set.
    """
    settings = get_settings()
    host = host or settings.HOST
    port = port or settings.PORT

    print(f"[green]Auth server running on port {port}[/green]")
    print(f"Base URL: {settings.BASE_URL}")
    uvicorn.run(
        "authglue.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
    )


@app.command()
def showconfig():
    """
    Print the callback URLs to register with each provider.
    """
    settings = get_settings()
    for provider, client_id in (
        ("google", settings.GOOGLE_CLIENT_ID),
        ("github", settings.GITHUB_CLIENT_ID),
    ):
        if client_id:
            print(f"[cyan]{provider}[/cyan]: {settings.callback_url(provider)}")
        else:
            print(f"[yellow]{provider}[/yellow]: not configured")


if __name__ == "__main__":
    app()
