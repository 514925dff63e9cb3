"""OmniFocus commands: validate, compose, execute and shape the result."""
