# Managers package init
"""
AccountHub Backend — Persistence Managers
===========================================

Manager Inventory:
    - GroupManager / UserManager (abstract): contracts used by services
    - SqlAlchemyGroupManager / SqlAlchemyUserManager: AsyncSession implementations
    - Pager: page of entities + pagination metadata
"""
