# app/orchestrator/temporal/config.py
import os

# Where the Temporal frontend is reachable
TEMPORAL_TARGET = os.getenv("TEMPORAL_TARGET", "localhost:7233")

# Which namespace to use
TEMPORAL_NAMESPACE = os.getenv("TEMPORAL_NAMESPACE", "default")

# Queue name both the worker listens on and the trigger starts runs on
TASK_QUEUE = os.getenv("TEMPORAL_TASK_QUEUE", "FREIGHT_DELAY_TASK_QUEUE")
