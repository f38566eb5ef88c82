"""HTTP-facing handlers for account routes. Each takes a Request and returns a JsonResponder."""

from modules.api.responder import JsonResponder


class UserController:
    def __init__(self, signup, signin, signout, signout_all, refresh, get_user, update_user, delete_user):
        self.signup_service = signup
        self.signin_service = signin
        self.signout_service = signout
        self.signout_all_service = signout_all
        self.refresh_service = refresh
        self.get_user_service = get_user
        self.update_user_service = update_user
        self.delete_user_service = delete_user

    def signup(self, req) -> JsonResponder:
        user = self.signup_service.execute(req)
        return JsonResponder.success("User signup successfully").with_data(user)

    def signin(self, req) -> JsonResponder:
        self.signin_service.execute(req)
        return JsonResponder.success("User signin successfully")

    def signout(self, req) -> JsonResponder:
        self.signout_service.execute(req)
        return JsonResponder.success("User signed out successfully.")

    def signout_all(self, req) -> JsonResponder:
        self.signout_all_service.execute(req)
        return JsonResponder.success("All sessions signed out successfully.")

    def refresh(self, req) -> JsonResponder:
        self.refresh_service.execute(req)
        return JsonResponder.success("Token refreshed successfully")

    def get_user(self, req) -> JsonResponder:
        user = self.get_user_service.execute(req)
        return JsonResponder.success("User retrieved successfully").with_data(user)

    def update_user(self, req) -> JsonResponder:
        user = self.update_user_service.execute(req)
        return JsonResponder.success("User updated successfully").with_data(user)

    def delete_user(self, req) -> JsonResponder:
        self.delete_user_service.execute(req)
        return JsonResponder.success("User deleted successfully")
