"""Infrastructure: database wiring and concrete stores."""
