"""Client side of formwizard: API client, local drafts, wizard, admin, viewer."""
