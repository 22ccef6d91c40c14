"""CLI interface for a promptsync control session.

Designed for agent automation. All commands return JSON.
"""

import json
import sys
from pathlib import Path

import click
import httpx

from promptsync.realtime.input_map import map_key, parse_axis, parse_symbol
from promptsync.realtime.session import ControlSession, SessionPhase
from promptsync.server.transport import RecordingTransport

DEFAULT_URL = "http://localhost:8000"


def get_client(ctx) -> httpx.Client:
    return httpx.Client(base_url=ctx.obj["url"], timeout=10.0)


def output(data: dict, ctx):
    if ctx.obj.get("pretty"):
        click.echo(json.dumps(data, indent=2))
    else:
        click.echo(json.dumps(data))


def handle_error(response: httpx.Response):
    if response.status_code >= 400:
        try:
            error = response.json()
        except Exception:
            error = {"error": response.text}
        click.echo(json.dumps(error), err=True)
        sys.exit(1)


def parse_steps(value: str) -> list[int]:
    """Parse "700, 500, 200" into a list of ints."""
    steps = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            steps.append(int(part))
        except ValueError:
            raise click.BadParameter(f"Invalid number: {part}") from None
    return steps


@click.group()
@click.option(
    "--url", envvar="PROMPTSYNC_API_URL", default=DEFAULT_URL, help="API base URL"
)
@click.option("--pretty/--no-pretty", default=True, help="Pretty print JSON output")
@click.pass_context
def cli(ctx, url, pretty):
    """promptsync CLI - drive a control session via the local API."""
    ctx.ensure_object(dict)
    ctx.obj["url"] = url
    ctx.obj["pretty"] = pretty


# --- State ---


@cli.command()
@click.pass_context
def state(ctx):
    """Get current session state."""
    with get_client(ctx) as client:
        r = client.get("/api/v1/session")
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.option("--limit", "-n", default=20, type=int, show_default=True)
@click.pass_context
def messages(ctx, limit):
    """Show recent outbound messages."""
    with get_client(ctx) as client:
        r = client.get("/api/v1/messages", params={"limit": limit})
        handle_error(r)
        output(r.json(), ctx)


# --- Control ---


@cli.command()
@click.argument("axis", type=click.Choice(["movement", "view"]))
@click.argument("symbol")
@click.pass_context
def press(ctx, axis, symbol):
    """Press SYMBOL on AXIS (e.g. `press movement forward`)."""
    with get_client(ctx) as client:
        r = client.post("/api/v1/control/press", json={"axis": axis, "symbol": symbol})
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.argument("axis", type=click.Choice(["movement", "view"]))
@click.argument("symbol", required=False)
@click.pass_context
def release(ctx, axis, symbol):
    """Release AXIS back to neutral."""
    with get_client(ctx) as client:
        body = {"axis": axis}
        if symbol:
            body["symbol"] = symbol
        r = client.post("/api/v1/control/release", json=body)
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.argument("key")
@click.option("--up", is_flag=True, help="Send a key release instead of a press")
@click.pass_context
def key(ctx, key, up):
    """Send a raw key event (WASD moves, IJKL looks)."""
    with get_client(ctx) as client:
        r = client.post("/api/v1/control/key", json={"key": key, "pressed": not up})
        handle_error(r)
        output(r.json(), ctx)


# --- Prompt ---


@cli.command()
@click.argument("text")
@click.pass_context
def prompt(ctx, text):
    """Schedule a prompt at the next frame slot."""
    with get_client(ctx) as client:
        r = client.post("/api/v1/prompt", json={"prompt": text})
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.pass_context
def reset(ctx):
    """Reset the session and ask the backend to restart generation."""
    with get_client(ctx) as client:
        r = client.post("/api/v1/reset")
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.argument("steps")
@click.pass_context
def steps(ctx, steps):
    """Set the denoising step list (e.g. `steps 700,500,200`)."""
    step_list = parse_steps(steps)
    with get_client(ctx) as client:
        r = client.post(
            "/api/v1/extension/denoising-steps",
            json={"denoising_step_list": step_list},
        )
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.argument("image", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--image-id", default=None, help="Image id (generated when omitted)")
@click.pass_context
def image(ctx, image, image_id):
    """Send IMAGE as the starting image."""
    import base64

    encoded = base64.b64encode(image.read_bytes()).decode("ascii")
    with get_client(ctx) as client:
        payload = {"base64_image": encoded}
        if image_id:
            payload["image_id"] = image_id
        r = client.post("/api/v1/extension/starting-image", json=payload)
        handle_error(r)
        output(r.json(), ctx)


@cli.command()
@click.argument("story_id", required=False)
@click.pass_context
def stories(ctx, story_id):
    """List prompt stories, or show one."""
    with get_client(ctx) as client:
        if story_id:
            r = client.get(f"/api/v1/stories/{story_id}")
        else:
            r = client.get("/api/v1/stories")
        handle_error(r)
        output(r.json(), ctx)


# --- Offline replay ---


def apply_event(session: ControlSession, transport: RecordingTransport, event: dict):
    """Apply one replay event to ``session``.

    Raises:
        ValueError: Unknown event or out-of-vocabulary input
    """
    kind = event.get("event")

    if kind in ("press", "release"):
        axis = parse_axis(event.get("axis", ""))
        if axis is None:
            raise ValueError(f"unknown axis {event.get('axis')!r}")
        if kind == "release":
            session.release(axis)
            return
        symbol = parse_symbol(axis, event.get("symbol", ""))
        if symbol is None:
            raise ValueError(f"unknown {axis.value} symbol {event.get('symbol')!r}")
        session.press(axis, symbol)

    elif kind == "key":
        if map_key(event.get("key")) is None:
            raise ValueError(f"unmapped key {event.get('key')!r}")
        pressed = event.get("pressed", True)
        if not isinstance(pressed, bool):
            raise ValueError(f"pressed must be true or false, got {pressed!r}")
        if pressed:
            session.key_down(event["key"])
        else:
            session.key_up(event["key"])

    elif kind == "submit":
        prompt = event.get("prompt", "")
        if not isinstance(prompt, str):
            raise ValueError(f"prompt must be a string, got {prompt!r}")
        session.submit(prompt)

    elif kind == "progress":
        transport.receive(
            {"type": "progress", "data": {"current_start_frame": event.get("frame")}}
        )

    elif kind == "message":
        transport.receive(event.get("message"))

    elif kind == "reset":
        explicit = event.get("explicit", True)
        if not isinstance(explicit, bool):
            raise ValueError(f"explicit must be true or false, got {explicit!r}")
        session.reset(explicit=explicit)

    elif kind == "phase":
        try:
            transport.set_phase(SessionPhase(event.get("phase")))
        except ValueError:
            raise ValueError(f"unknown phase {event.get('phase')!r}") from None

    else:
        raise ValueError(f"unknown event {kind!r}")


@cli.command()
@click.argument("events_file", type=click.File("r"))
@click.option(
    "--emit-neutral-on-reset",
    is_flag=True,
    help="Send a neutral control message after explicit resets",
)
@click.option(
    "--auto-start-prompt",
    default=None,
    help="Send set_prompt and start with this text once the session is ready",
)
@click.pass_context
def replay(ctx, events_file, emit_neutral_on_reset, auto_start_prompt):
    """Replay JSON-lines EVENTS_FILE against a local session (no server).

    Prints the outbound messages the session would send.
    """
    transport = RecordingTransport(phase=SessionPhase.READY)
    session = ControlSession(
        transport.send,
        emit_neutral_on_reset=emit_neutral_on_reset,
        auto_start_prompt=auto_start_prompt,
    )
    transport.bind(session)

    skipped = 0
    for line_no, line in enumerate(events_file, start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            event = json.loads(line)
            if not isinstance(event, dict):
                raise ValueError("event must be a JSON object")
            apply_event(session, transport, event)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            skipped += 1
            click.echo(f"line {line_no}: skipped ({e})", err=True)

    output(
        {
            "messages": transport.messages,
            "skipped": skipped,
            "state": session.snapshot(),
        },
        ctx,
    )


def main():
    cli()


if __name__ == "__main__":
    main()
