# Services package init
"""
Oleang Blog API: Services Layer
===============================

What:  Route logic sitting between the HTTP layer and the remote store.
How:   Services are stateless singletons; every method receives the
       RemoteStore to use, injected into routes through get_store().

Service Inventory:
    - RemoteStore (abstract): interface to the hosted data/auth platform
    - SupabaseStore: concrete PostgREST + GoTrue client over httpx
    - PostService: list / create / get posts, category joins
    - LikeService: like state, two-phase like/unlike, reconciliation
    - CommentService: list / create comments with commenter details
    - UserService: sign-up, log-in, allow-listed profile updates
"""
