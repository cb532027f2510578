"""Background and outbound services: trigger engine, dispatcher, executors, senders."""
