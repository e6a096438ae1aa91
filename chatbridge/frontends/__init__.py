"""Front ends - Batch and interactive terminal modes."""

# Use: from chatbridge.frontends.batch import run_batch
# Use: from chatbridge.frontends.interactive import InteractiveSession
