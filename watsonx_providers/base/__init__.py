"""Provider-agnostic building blocks: errors, cancellation, logging, HTTP,
data models and streaming primitives."""
