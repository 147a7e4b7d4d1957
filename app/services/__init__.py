# Services package.
#
# Each module exposes a focused set of async functions that encapsulate
# the business rules for a single domain aggregate:
#
#   post_service    : visibility rules + owner/admin checks for Post
#   comment_service : comment threads with owner/admin checks
#   user_service    : registration, login and admin promotion
#
# All service functions accept an AsyncSession as their first argument
# so that the router layer controls the transaction boundary via the
# ``get_db`` dependency.  Failures are raised as app.errors exceptions.
