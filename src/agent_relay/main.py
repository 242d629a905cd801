"""Main entry point: run the relay server or chat with it from a terminal."""

import argparse
import asyncio
import logging
import sys

from .chat_client import ChatClient, ChatConversation, ThreadAcquisitionError
from .config import ConfigError, RelayConfig
from .models import ERROR_PREFIX
from .thread_store import ThreadIdStore


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] %(levelname)s %(name)s - %(message)s",
    )


def run_server(config_path: str, host: str | None = None, port: int | None = None) -> None:
    """Load config, build the agent session and serve the API with uvicorn.

    Args:
        config_path: Path to config file
        host: Override for server.host
        port: Override for server.port
    """
    import uvicorn

    from .api import create_app

    config = RelayConfig.load(config_path)
    configure_logging(config.log_level)

    try:
        app = create_app(config)
    except (ConfigError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    uvicorn.run(
        app,
        host=host or config.host,
        port=port or config.port,
        log_level=config.log_level.lower(),
    )


async def run_chat(api_url: str, state_file: str) -> None:
    """Interactive terminal conversation with a running relay.

    Args:
        api_url: Base URL of the relay server
        state_file: JSON file caching the thread id between runs
    """
    client = ChatClient(api_url)
    conversation = ChatConversation(client, ThreadIdStore(state_file))

    try:
        try:
            thread_id = await conversation.ensure_thread()
        except ThreadAcquisitionError as e:
            print(f"Error: {e}")
            sys.exit(1)

        print(f"Connected to {api_url} (thread {thread_id})")
        print("Type a message. /reset starts a new conversation, /quit exits.\n")

        while True:
            try:
                text = await asyncio.to_thread(input, "You: ")
            except EOFError:
                break

            command = text.strip().lower()
            if command in ("/quit", "/exit"):
                break
            if command == "/reset":
                try:
                    thread_id = await conversation.reset()
                except ThreadAcquisitionError as e:
                    print(f"Error: {e}")
                    sys.exit(1)
                print(f"[New conversation: {thread_id}]\n")
                continue
            if not command:
                continue

            print("AI is thinking...")
            try:
                reply = await conversation.send(text)
            except Exception as e:
                print(f"Error sending message: {e}\n")
                continue

            if reply is None:
                continue
            marker = " (error)" if reply.content.startswith(ERROR_PREFIX) else ""
            print(f"AI [{reply.timestamp}]{marker}: {reply.content}\n")
    finally:
        await client.close()


def cli() -> None:
    """Command-line interface entry point."""
    parser = argparse.ArgumentParser(
        description="agent-relay - chat with a hosted AI agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve the relay API
  agent-relay serve --config .agent-relay/config.yaml

  # Chat with a running relay
  agent-relay chat --api-url http://localhost:5000

Environment variables:
  AZURE_AI_PROJECT_ENDPOINT   AI Foundry project endpoint
  AZURE_AI_AGENT_ID           Pre-provisioned agent id
  AZURE_AI_THREAD_ID          Default thread id
""",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the relay HTTP API")
    serve.add_argument(
        "--config",
        default=".agent-relay/config.yaml",
        help="Path to config file (default: .agent-relay/config.yaml)",
    )
    serve.add_argument("--host", help="Bind address (default: from config)")
    serve.add_argument("--port", type=int, help="Port (default: from config)")

    chat = subparsers.add_parser("chat", help="Chat with a running relay")
    chat.add_argument(
        "--api-url",
        default="http://localhost:5000",
        help="Relay base URL (default: http://localhost:5000)",
    )
    chat.add_argument(
        "--state-file",
        default=".agent-relay/client-state.json",
        help="Where the thread id is cached (default: .agent-relay/client-state.json)",
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.config, host=args.host, port=args.port)
    else:
        configure_logging("WARNING")
        try:
            asyncio.run(run_chat(args.api_url, args.state_file))
        except KeyboardInterrupt:
            print("\nShutting down...")


if __name__ == "__main__":
    cli()
