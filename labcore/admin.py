"""
Django admin registrations for the lab models.

Soft-deleted rows stay visible here (the admin uses ``all_objects``) so
that operators can inspect or restore them.
"""

from django.contrib import admin

from .models import Address, Lab, LabManager, LabTest, TestCatalog, TestDetail, TestOrder, User


class AllRowsAdmin(admin.ModelAdmin):
    def get_queryset(self, request):
        return self.model.all_objects.all()


@admin.register(User)
class UserAdmin(AllRowsAdmin):
    list_display = ('email', 'name', 'role', 'is_email_verified', 'is_deleted', 'managed_by', 'created_at')
    list_filter = ('role', 'is_email_verified', 'is_deleted')
    search_fields = ('email', 'name')
    exclude = ('password', 'email_verification_token', 'reset_token')
    raw_id_fields = ('created_by', 'managed_by')


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ('address_line1', 'city', 'country', 'entity_type', 'entity_id', 'latitude', 'longitude')
    list_filter = ('entity_type', 'country')
    search_fields = ('address_line1', 'city', 'postal_code')


class LabManagerInline(admin.TabularInline):
    model = LabManager
    extra = 0
    raw_id_fields = ('user',)


@admin.register(Lab)
class LabAdmin(AllRowsAdmin):
    list_display = ('name', 'phone_number', 'email', 'is_deleted', 'created_at')
    list_filter = ('is_deleted',)
    search_fields = ('name', 'email', 'phone_number')
    inlines = [LabManagerInline]


@admin.register(TestCatalog)
class TestCatalogAdmin(AllRowsAdmin):
    list_display = ('test_name', 'price', 'is_deleted')
    list_filter = ('is_deleted',)
    search_fields = ('test_name',)


@admin.register(LabTest)
class LabTestAdmin(AllRowsAdmin):
    list_display = ('lab', 'catalog', 'price', 'is_deleted')
    list_filter = ('is_deleted', 'lab')


class TestDetailInline(admin.TabularInline):
    model = TestDetail
    extra = 0


@admin.register(TestOrder)
class TestOrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'lab', 'status', 'created_at')
    list_filter = ('status', 'lab')
    inlines = [TestDetailInline]
