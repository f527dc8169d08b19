# Supabase Auth
# This module uses Supabase's built-in authentication system.
# Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and reset emails

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
- auth.reset_password_for_email() - Send a password reset link

The handle_new_user trigger (supabase/migrations) creates a profiles row
and a user_roles row with role 'user' for every new auth user.
"""
