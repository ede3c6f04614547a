"""Unauthenticated pages. Always reachable; never listed in menus."""
from portal.services.routing import route

PUBLIC_ROUTES = [
    route('signIn', '/sign-in', 'auth/SignIn'),
    route('signUp', '/sign-up', 'auth/SignUp'),
    route('forgotPassword', '/forgot-password', 'auth/ForgotPassword'),
    route('resetPassword', '/reset-password', 'auth/ResetPassword'),
]
