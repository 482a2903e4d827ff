"""User-facing message catalog.

Every message the API returns is looked up here by key so the locale can be
switched with ``LIBRARY_LOCALE`` without touching the handlers. Messages may
contain ``str.format`` placeholders.
"""

from backend.config import LIBRARY_LOCALE

CATALOG = {
    "en": {
        "category.name_required": "Category name is required",
        "category.name_too_long": "Category name must not exceed 50 characters",
        "category.name_not_string": "Category name must be a string",
        "category.description_not_string": "Description must be a string",
        "category.exists": "Category already exists",
        "category.not_found": "Category not found",
        "category.has_books": "Cannot delete. The category still has books",
        "category.has_books_count": "Cannot delete. The category still has {count} book(s)",
        "category.list_failed": "An error occurred while fetching categories",
        "category.create_failed": "An error occurred while creating the category",
        "category.update_failed": "An error occurred while updating the category",
        "category.delete_failed": "An error occurred while deleting the category",
        "category.created": "Category created successfully",
        "category.updated": "Category updated successfully",
        "category.deleted": "Category deleted successfully",
        "profile.name_required": "Name is required",
        "profile.name_too_long": "Name must not exceed 50 characters",
        "profile.phone_invalid": "Phone number format is invalid",
        "profile.address_required": "Address is required",
        "profile.address_too_long": "Address must not exceed 255 characters",
        "profile.field_not_string": "Value must be a string",
        "profile.not_found": "User profile not found",
        "profile.get_failed": "An error occurred while fetching the profile",
        "profile.update_failed": "An error occurred while updating the profile",
        "profile.updated": "Profile updated successfully",
        "password.current_required": "Current password is required",
        "password.new_required": "New password is required",
        "password.length": "Password must be 8-16 characters",
        "password.confirm_required": "Password confirmation is required",
        "password.confirm_mismatch": "Password confirmation does not match",
        "password.current_invalid": "Current password is incorrect",
        "password.must_differ": "New password must be different from the current password",
        "password.change_failed": "An error occurred while changing the password",
        "password.changed": "Password changed successfully. Please log in again",
        "auth.required": "Authentication required",
        "auth.session_expired": "Your session has expired. Please log in again",
        "auth.forbidden": "You do not have permission to perform this action",
        "auth.invalid_login": "Invalid email or password",
        "auth.account_inactive": "This account is not active",
        "auth.logged_in": "Logged in successfully",
        "auth.logged_out": "Logged out successfully",
        "request.invalid": "Invalid request data",
        "server.error": "An unexpected error occurred. Please contact support.",
    },
    "vi": {
        "category.name_required": "Tên thể loại không được để trống",
        "category.name_too_long": "Tên thể loại không được vượt quá 50 ký tự",
        "category.name_not_string": "Tên thể loại phải là chuỗi ký tự",
        "category.description_not_string": "Mô tả phải là chuỗi ký tự",
        "category.exists": "Thể loại đã tồn tại",
        "category.not_found": "Không tìm thấy thể loại",
        "category.has_books": "Không thể xóa. Thể loại đang có sách",
        "category.has_books_count": "Không thể xóa. Thể loại đang có {count} cuốn sách",
        "category.list_failed": "Đã xảy ra lỗi khi lấy danh sách thể loại",
        "category.create_failed": "Đã xảy ra lỗi khi thêm thể loại",
        "category.update_failed": "Đã xảy ra lỗi khi cập nhật thể loại",
        "category.delete_failed": "Đã xảy ra lỗi khi xóa thể loại",
        "category.created": "Thêm thể loại thành công",
        "category.updated": "Cập nhật thể loại thành công",
        "category.deleted": "Xóa thể loại thành công",
        "profile.name_required": "Tên không được để trống",
        "profile.name_too_long": "Tên không được vượt quá 50 ký tự",
        "profile.phone_invalid": "Số điện thoại không đúng định dạng",
        "profile.address_required": "Địa chỉ không được để trống",
        "profile.address_too_long": "Địa chỉ không được vượt quá 255 ký tự",
        "profile.field_not_string": "Giá trị phải là chuỗi ký tự",
        "profile.not_found": "Không tìm thấy thông tin người dùng",
        "profile.get_failed": "Đã xảy ra lỗi khi lấy thông tin hồ sơ",
        "profile.update_failed": "Đã xảy ra lỗi khi cập nhật thông tin",
        "profile.updated": "Cập nhật thông tin thành công",
        "password.current_required": "Mật khẩu hiện tại không được để trống",
        "password.new_required": "Mật khẩu mới không được để trống",
        "password.length": "Mật khẩu phải từ 8-16 ký tự",
        "password.confirm_required": "Mật khẩu xác nhận không được để trống",
        "password.confirm_mismatch": "Mật khẩu xác nhận không khớp",
        "password.current_invalid": "Mật khẩu hiện tại không đúng",
        "password.must_differ": "Mật khẩu mới phải khác mật khẩu cũ",
        "password.change_failed": "Đã xảy ra lỗi khi đổi mật khẩu",
        "password.changed": "Đổi mật khẩu thành công. Vui lòng đăng nhập lại",
        "auth.required": "Vui lòng đăng nhập",
        "auth.session_expired": "Phiên đăng nhập đã hết hạn. Vui lòng đăng nhập lại",
        "auth.forbidden": "Bạn không có quyền thực hiện thao tác này",
        "auth.invalid_login": "Email hoặc mật khẩu không đúng",
        "auth.account_inactive": "Tài khoản không hoạt động",
        "auth.logged_in": "Đăng nhập thành công",
        "auth.logged_out": "Đăng xuất thành công",
        "request.invalid": "Dữ liệu không hợp lệ",
        "server.error": "Đã xảy ra lỗi không mong muốn. Vui lòng liên hệ quản trị viên.",
    },
}

DEFAULT_LOCALE = "en"


def translate(key: str, locale: str | None = None, **params) -> str:
    messages = CATALOG.get(locale or LIBRARY_LOCALE) or CATALOG[DEFAULT_LOCALE]
    template = messages.get(key) or CATALOG[DEFAULT_LOCALE].get(key, key)
    return template.format(**params) if params else template
