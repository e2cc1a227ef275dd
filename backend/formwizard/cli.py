"""Command-line entry points.

Usage:
    python -m formwizard.cli serve [--host 0.0.0.0] [--port 8000]
    python -m formwizard.cli init-db        # create tables, seed the default layout
    python -m formwizard.cli wizard         # fill in the onboarding form
    python -m formwizard.cli admin          # edit which fields show on which panel
    python -m formwizard.cli submissions    # list stored submissions
"""

import argparse
import asyncio
import getpass
import sys

from formwizard.client.admin import AdminConfigEditor
from formwizard.client.api import FormWizardClient
from formwizard.client.drafts import LocalDraftStore
from formwizard.client.viewer import SubmissionsViewer
from formwizard.client.wizard import WizardController
from formwizard.config import settings
from formwizard.logging_config import configure_logging
from formwizard.utils.helpers import FIELD_LABELS

STEP_TITLES = {
    1: "Welcome! Please start by entering your login info:",
    2: "Please fill out the following information:",
    3: "Almost there! Just a little more info...",
}


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("formwizard.main:app", host=host, port=port)


async def init_db() -> None:
    from formwizard.database import async_session, create_tables
    from formwizard.services.config_store import field_config_store

    await create_tables()
    async with async_session() as db:
        config = await field_config_store.load(db)
    print(f"  Panel 2: {', '.join(config.enabled_on(2)) or '(empty)'}")
    print(f"  Panel 3: {', '.join(config.enabled_on(3)) or '(empty)'}")


def _prompt_step(wizard: WizardController) -> None:
    for field in wizard.fields_for_step(wizard.current_step):
        label = FIELD_LABELS[field]
        if field == "birthdate":
            label += " (YYYY-MM-DD)"
        current = wizard.form_data.get(field, "")
        if field == "password":
            value = getpass.getpass(f"{label}: ")
        else:
            suffix = f" [{current}]" if current else ""
            value = input(f"{label}{suffix}: ") or current
        wizard.set_field(field, value)


async def run_wizard(base_url: str, draft_path: str) -> None:
    async with FormWizardClient(base_url) as api:
        wizard = WizardController(api, LocalDraftStore(draft_path))
        await wizard.mount()

        while not wizard.is_finished:
            print(f"\n[Step {wizard.current_step} of {wizard.last_step}] "
                  f"{STEP_TITLES[wizard.current_step]}")
            _prompt_step(wizard)

            choice = "n"
            if wizard.current_step > 1:
                choice = input(f"({wizard.action}/back) [{wizard.action}]: ").strip().lower()
            if choice in ("b", "back"):
                wizard.previous()
                continue

            await wizard.advance()
            for field, message in wizard.field_errors.items():
                print(f"  ! {FIELD_LABELS.get(field, field)}: {message}")
            if wizard.general_error:
                print(f"  ! {wizard.general_error}")

        print("\nThank You! Your information has been submitted successfully.")


async def run_admin(base_url: str) -> None:
    async with FormWizardClient(base_url) as api:
        editor = AdminConfigEditor(api)
        await editor.load()
        if editor.load_error:
            print(f"Error loading configuration: {editor.load_error}")
            return

        while True:
            print("\nField          Enabled  Panel")
            for i, row in enumerate(editor.rows, start=1):
                panel = str(row.panel) if row.panel_selectable else "-"
                print(f"{i}. {row.label:<12} {'yes' if row.enabled else 'no':<8} {panel}")
            if editor.validation_error:
                print(f"  ! {editor.validation_error}")
            if editor.status:
                print(f"  {editor.status}")

            cmd = input("toggle N | panel N 2|3 | save | quit: ").split()
            if not cmd:
                continue
            if cmd[0] == "quit":
                return
            if cmd[0] == "save":
                await editor.save()
                continue
            try:
                key = editor.rows[int(cmd[1]) - 1].key
                if cmd[0] == "toggle":
                    editor.toggle(key)
                elif cmd[0] == "panel":
                    editor.set_panel(key, int(cmd[2]))
            except (IndexError, ValueError) as exc:
                print(f"  ! {exc}")


async def show_submissions(base_url: str) -> None:
    async with FormWizardClient(base_url) as api:
        viewer = SubmissionsViewer(api)
        await viewer.load()
        print(viewer.render())


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="formwizard")
    parser.add_argument("--api", default=settings.api_base_url, help="API base URL")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    serve_p = sub.add_parser("serve", help="Run the API server")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    sub.add_parser("init-db", help="Create tables and seed the default layout")
    wizard_p = sub.add_parser("wizard", help="Fill in the onboarding form")
    wizard_p.add_argument("--draft", default=settings.draft_path, help="Local draft file")
    sub.add_parser("admin", help="Edit the field layout")
    sub.add_parser("submissions", help="List stored submissions")

    args = parser.parse_args(argv)
    configure_logging(args.log_level or ("INFO" if args.command == "serve" else "WARNING"))

    if args.command == "serve":
        serve(args.host, args.port)
    elif args.command == "init-db":
        asyncio.run(init_db())
    elif args.command == "wizard":
        asyncio.run(run_wizard(args.api, args.draft))
    elif args.command == "admin":
        asyncio.run(run_admin(args.api))
    elif args.command == "submissions":
        asyncio.run(show_submissions(args.api))
    return 0


if __name__ == "__main__":
    sys.exit(main())
