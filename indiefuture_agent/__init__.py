"""indiefuture-agent.

An interactive agent runner: a human issues a high-level task, an LLM breaks it
down into smaller operations, and the operations run with human confirmation
while their results accumulate in a shared context.

High-level architecture
-----------------------

- **Subtask stack**: every pending operation is a ``WorkItem`` tagged with the
  exploration depth it was scheduled at. The engine always runs the most
  recently pushed item first.
- **Capabilities**: one implementation per operation kind. A capability never
  touches the stack; it returns an ``ExecutionOutcome`` telling the engine how
  to mutate the stack and the context memory.
- **Context memory**: an append-only evidence log that later planning and
  explanation steps read from.
- **Confirmation gate**: a human yes/no checkpoint in front of shell commands
  and file edits. Declining ends the current run.

Core subpackages
----------------

- ``indiefuture_agent.agent_core``: schemas, capabilities, the LangGraph-based
  ``SubtaskEngine`` and the LLM client abstraction.
- ``indiefuture_agent.core``: settings and logging configuration.
- ``indiefuture_agent.cli``: the click-based turn loop.

Typical workflow
----------------

1. Build an engine with ``indiefuture_agent.agent_core.factory.build_engine``.
2. Push a ``RunTask`` with ``push_initial_operation``.
3. Call ``drain()`` and inspect the returned ``RunOutcome``.
"""

__version__ = "0.1.0"
