"""HTTP routers for tasks and the calendar view."""
