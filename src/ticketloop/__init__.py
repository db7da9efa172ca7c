"""ticketloop - run a coding agent once per ticket, strictly in sequence."""
