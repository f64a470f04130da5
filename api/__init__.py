"""HTTP routers for marathon sessions and the admin CMS."""
