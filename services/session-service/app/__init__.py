"""Session service: register/login/logout coordination."""
