from django.contrib import admin

from .models import Category, MenuItem, Modifier, ModifierGroup


class ModifierInline(admin.TabularInline):
    model = Modifier
    extra = 0


class ModifierGroupInline(admin.TabularInline):
    model = ModifierGroup
    extra = 0
    show_change_link = True


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "display_order", "is_active")
    list_editable = ("display_order", "is_active")
    search_fields = ("name",)


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "printer_destination", "is_available")
    list_filter = ("category", "printer_destination", "is_available")
    search_fields = ("name",)
    inlines = [ModifierGroupInline]


@admin.register(ModifierGroup)
class ModifierGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "menu_item", "is_required", "min_selections", "max_selections")
    search_fields = ("name", "menu_item__name")
    inlines = [ModifierInline]
