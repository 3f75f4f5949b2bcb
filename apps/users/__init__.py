"""Users app package.

Defines the company a user acts for and the custom user model with
company roles. Use ``apps.users.models.CustomUser`` as the AUTH_USER_MODEL
throughout the project.
"""
