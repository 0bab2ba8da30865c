"""Request core: device timing policy, cancellation, execution and failure classification.

Kept free of game semantics so every lobby and gameplay action flows through the
same delivery path and reports failures the same way.
"""
