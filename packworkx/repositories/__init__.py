"""
Repositories encapsulate company-scoped data access.

Each repository is constructed with an AsyncSession and the caller's company id
(taken from the JWT via packworkx.core.deps.get_current_company_id).
"""
