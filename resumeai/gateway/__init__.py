"""Provider fallback gateway.

Turns one logical "generate structured text from a prompt" call into an
ordered, sequential walk over heterogeneous text-generation backends:
  - Protocol Adapters (chat completion / content generation wire formats)
  - Fallback Dispatcher (per-attempt timeouts, first success wins)
  - Structured Recovery (repairs near-valid JSON text)
  - Provider Registry (one-time construction from settings)
"""
