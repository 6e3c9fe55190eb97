from django.contrib import admin
from .models import DomainActivity

@admin.register(DomainActivity)
class DomainActivityAdmin(admin.ModelAdmin):
    list_display = ('verb', 'actor', 'marathon', 'content_type', 'object_id', 'timestamp')
    list_filter = ('verb', 'marathon')
    search_fields = ('verb', 'actor__email')
    readonly_fields = ('actor', 'verb', 'content_type', 'object_id', 'marathon', 'metadata', 'timestamp')
