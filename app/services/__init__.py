# Services package.
#
# Each module exposes focused async functions holding the business logic
# and database access for one concern:
#
#   token_service  access token signing, refresh token rotation
#   authorization  ownership checks
#   user_service  credential store, auth flow, profile CRUD
#   post_service  post CRUD + pagination + markdown formatting
#   comment_service  comment CRUD on posts
#   category_service  category CRUD with slug uniqueness
#
# Functions touching storage take an AsyncSession as their first argument
# so the router layer controls the transaction boundary via ``get_db``.
# Failures are raised as the typed errors in ``app.errors``.
