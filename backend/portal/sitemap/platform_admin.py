"""Screens shared by the CS roles: workspaces, customers, shop attributes and parts management."""
from portal.constants.roles import CS_ADMIN, CS_USER, TENANT_ADMIN
from portal.services.routing import route

_CS = [CS_ADMIN, CS_USER]
_CONTAINED = {'pageContainerType': 'contained'}


def _parts(resource: str):
    return [CS_ADMIN, CS_USER, TENANT_ADMIN, f'{resource}.all', f'{resource}.read']


PLATFORM_ADMIN_ROUTES = [
    route('tenantportal.workspaces', '/tenantportal/workspaces', 'admin/workspaces/WorkspaceManagementPage', _CS),
    route('tenantportal.workspaces.create', '/tenantportal/workspaces/create', 'admin/workspaces/WorkspaceCreateForm', _CS),
    route('tenantportal.workspaces.assignments', '/tenantportal/workspaces/assignments', 'admin/workspaces/WorkspaceAssignments', _CS),
    route('tenantportal.workspaces.edit', '/tenantportal/workspaces/edit/:workspaceId', 'admin/workspaces/WorkspaceEditForm', _CS),
    route('admin.customers.list', '/admin/customers', 'admin/customers/CustomerListPage', _CS,
          meta={'header': {'title': 'Customer Management'}}),
    route('admin.customers.create', '/admin/customers/create', 'admin/customers/CustomerCreateWizard', _CS,
          meta={'header': {'title': 'Create Customer'}}),
    route('admin.customers.edit', '/admin/customers/edit/:customerId', 'admin/customers/EditCustomerPage', _CS,
          meta={'header': {'title': 'Edit Customer'}}),
    route('tenantportal.shopAttributes.attributes', '/admin/shop-attributes', 'admin/shop-attributes/ShopAttributeListPage', _CS,
          meta={'header': {'title': 'Shop Attributes'}, **_CONTAINED}),
    route('tenantportal.shopAttributes.attributes.create', '/admin/shop-attributes/create', 'admin/shop-attributes/ShopAttributeFormPage', _CS,
          meta={'header': {'title': 'Create Shop Attribute'}, **_CONTAINED}),
    route('tenantportal.shopAttributes.attributes.edit', '/admin/shop-attributes/edit/:id', 'admin/shop-attributes/ShopAttributeFormPage', _CS,
          meta={'header': {'title': 'Edit Shop Attribute'}, **_CONTAINED}),
    route('tenantportal.shopAttributes.categories', '/admin/attribute-categories', 'admin/attribute-categories/AttributeCategoryListPage', _CS,
          meta={'header': {'title': 'Attribute Categories'}, **_CONTAINED}),
    route('tenantportal.shopAttributes.units', '/admin/attribute-units', 'admin/attribute-units/AttributeUnitListPage', _CS,
          meta={'header': {'title': 'Attribute Units'}, **_CONTAINED}),
    route('partsManagement.manufacturers', '/parts-management/manufacturers', 'parts-management/manufacturers/ManufacturerManagementPage',
          _parts('manufacturer'), meta={'header': {'title': 'Manufacturer Management'}, **_CONTAINED}),
    route('partsManagement.brands', '/parts-management/brands', 'parts-management/brands/BrandManagementPage',
          _parts('brand'), meta={'header': {'title': 'Brand Management'}, **_CONTAINED}),
    route('partsManagement.suppliers', '/parts-management/suppliers', 'parts-management/suppliers/SupplierManagementPage',
          _parts('suppliers'), meta={'header': {'title': 'Supplier Management'}, **_CONTAINED}),
    route('partsManagement.masterParts', '/parts-management/master-parts', 'parts-management/master-parts/MasterPartManagementPage',
          _parts('masterparts'), meta={'header': {'title': 'Master Parts Management'}, **_CONTAINED}),
]
