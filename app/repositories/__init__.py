# Repositories package.
#
# Thin async data-access modules, one per table:
#
#   post_repository    : Post rows, newest-first listing with author loaded
#   comment_repository : Comment rows scoped to a post
#   user_repository    : User lookups for auth and admin bootstrap
#
# Functions take an AsyncSession first, flush but never commit, and turn
# any SQLAlchemyError into app.errors.PersistenceError.
