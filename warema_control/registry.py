"""
CommandRegistry - Explicit command registration pattern

Bounded Context: Command registration and validation
Responsibilities:
  - Register command handlers by command topic suffix
  - Reject unknown commands before execution
  - Provide introspection (available_commands, get_help)

Threading: Thread-safe (uses lock for write operations)
Pattern: Registry with explicit registration
"""

from typing import Callable, Dict, Set
import threading

from warema_mqtt.schemas import CommandKind, CommandRequest


class CommandNotAvailableError(Exception):
    """Raised when attempting to execute an unregistered command"""
    pass


class CommandRegistry:
    """
    Registry of inbound command handlers.

    Key Features:
      - Fail-fast: Invalid commands rejected immediately
      - Introspection: Can query available commands at runtime
      - Self-Documenting: Each command has description

    Example:
        registry = CommandRegistry()
        registry.register(CommandKind.SET, plane.handle_set, "Open, close or stop")

        try:
            registry.execute(request)
        except CommandNotAvailableError as e:
            print(f"Command not available: {e}")
    """

    def __init__(self):
        self._commands: Dict[CommandKind, Callable[[CommandRequest], None]] = {}
        self._descriptions: Dict[CommandKind, str] = {}
        self._lock = threading.Lock()

    def register(
        self,
        command: CommandKind,
        handler: Callable[[CommandRequest], None],
        description: str,
    ) -> None:
        """
        Register a command with its handler function.

        Raises:
            ValueError: If command already registered (double registration)
        """
        with self._lock:
            if command in self._commands:
                raise ValueError(f"Command '{command.value}' already registered")

            self._commands[command] = handler
            self._descriptions[command] = description

    def execute(self, request: CommandRequest) -> None:
        """
        Execute the handler registered for ``request.kind``.

        Raises:
            CommandNotAvailableError: If command not registered
        """
        handler = self._commands.get(request.kind)
        if handler is None:
            raise CommandNotAvailableError(
                f"Command '{request.kind.value}' not available. "
                f"Available commands: {', '.join(sorted(self.available_commands))}"
            )
        handler(request)

    def is_available(self, command: CommandKind) -> bool:
        return command in self._commands

    @property
    def available_commands(self) -> Set[str]:
        """Snapshot of registered command names."""
        return {command.value for command in self._commands}

    def get_help(self) -> Dict[str, str]:
        """Snapshot of command name → description."""
        return {command.value: text for command, text in self._descriptions.items()}

    def count(self) -> int:
        return len(self._commands)
