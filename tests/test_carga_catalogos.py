# tests/test_carga_catalogos.py
import pytest
from sqlalchemy import select

from localidades.core.exceptions import CargaCatalogoError
from localidades.models import CatCodigoPostal, CatEstado, CatLocalidad, CatMunicipio
from localidades.services import carga_catalogos
from localidades.services.carga_catalogos import (
    LocalidadCSV,
    MunicipioCSV,
    estadisticas_catalogos,
    llenar_catalogo_localidades,
    parsear_catalogo,
    poblar_catalogos,
)
from tests.conftest import QUERETARO, escribir_catalogos, escribir_csv


# ---------- parseo (sin base) ----------

def test_parsear_catalogo_convierte_tipos(tmp_path):
    escribir_csv(tmp_path, "cat_localidades", [(" 7 ", " Centro ", "01000", "22", "9")])

    registros = parsear_catalogo(str(tmp_path), "cat_localidades", LocalidadCSV)

    assert registros == [
        LocalidadCSV(id_localidad=7, localidad="Centro", cp=1000, id_municipio=22, id_estado=9)
    ]
    assert registros[0].to_row() == {
        "id": 7, "localidad": "Centro", "codigo_postal": 1000, "id_municipio": 22, "id_estado": 9,
    }


@pytest.mark.parametrize(
    "fila",
    [
        ("abc", "Querétaro", "9"),
        ("22", "Querétaro", "9.5"),
        ("22", "", "9"),
        ("22", "x" * 51, "9"),
        ("2²", "Querétaro", "9"),
    ],
)
def test_parsear_catalogo_fila_mal_formada_aborta(tmp_path, fila):
    escribir_csv(tmp_path, "cat_municipios", [("1", "Corregidora", "9"), fila])

    with pytest.raises(CargaCatalogoError) as exc:
        parsear_catalogo(str(tmp_path), "cat_municipios", MunicipioCSV)

    assert "cat_municipios.csv, línea 3" in str(exc.value)


def test_parsear_catalogo_archivo_inexistente(tmp_path):
    with pytest.raises(CargaCatalogoError, match="no existe"):
        parsear_catalogo(str(tmp_path), "cat_municipios", MunicipioCSV)


def test_parsear_catalogo_columnas_faltantes(tmp_path):
    escribir_csv(tmp_path, "cat_municipios", [("22", "Querétaro")], encabezado=["id_municipio", "municipio"])

    with pytest.raises(CargaCatalogoError, match="faltan columnas id_estado"):
        parsear_catalogo(str(tmp_path), "cat_municipios", MunicipioCSV)


def test_parsear_catalogo_columnas_de_mas(tmp_path):
    escribir_csv(tmp_path, "cat_municipios", [("22", "Querétaro", "9", "sobra")])

    with pytest.raises(CargaCatalogoError, match="columnas de más"):
        parsear_catalogo(str(tmp_path), "cat_municipios", MunicipioCSV)


def test_parsear_catalogo_archivo_vacio(tmp_path):
    (tmp_path / "cat_localidades.csv").write_text("", encoding="utf-8")

    with pytest.raises(CargaCatalogoError, match="falta el encabezado"):
        parsear_catalogo(str(tmp_path), "cat_localidades", LocalidadCSV)


def test_parsear_catalogo_encabezado_ajeno_sin_filas(tmp_path):
    (tmp_path / "cat_localidades.csv").write_text("foo,bar\n", encoding="utf-8")

    with pytest.raises(CargaCatalogoError, match="faltan columnas id_localidad"):
        parsear_catalogo(str(tmp_path), "cat_localidades", LocalidadCSV)


# ---------- carga contra la base ----------

@pytest.mark.anyio
async def test_poblar_catalogos_inserta_los_cuatro_catalogos(session, catalogos_queretaro):
    resumen = await poblar_catalogos(session, str(catalogos_queretaro))

    assert resumen == {
        "cat_estados": 1,
        "cat_municipios": 1,
        "cat_codigos_postales": 1,
        "cat_localidades": 1,
    }
    estado = await session.get(CatEstado, 9)
    assert estado.estado == "Querétaro"


@pytest.mark.anyio
async def test_segunda_carga_no_inserta(session, catalogos_queretaro):
    await poblar_catalogos(session, str(catalogos_queretaro))
    despues_primera = await estadisticas_catalogos(session)

    resumen = await poblar_catalogos(session, str(catalogos_queretaro))

    assert set(resumen.values()) == {0}
    assert await estadisticas_catalogos(session) == despues_primera


@pytest.mark.anyio
async def test_tabla_con_datos_no_lee_el_csv(session, catalogos_queretaro):
    await poblar_catalogos(session, str(catalogos_queretaro))
    # Un CSV roto ya no importa: la tabla tiene registros
    escribir_csv(catalogos_queretaro, "cat_localidades", [("x", "", "", "", "")])

    resumen = await poblar_catalogos(session, str(catalogos_queretaro))

    assert resumen["cat_localidades"] == 0


@pytest.mark.anyio
async def test_localidades_se_insertan_por_lotes(session, tmp_path, monkeypatch):
    datos = dict(QUERETARO)
    datos["cat_localidades"] = [(i, f"Localidad {i}", 76000, 22, 9) for i in range(1, 13)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)
    await poblar_catalogos(session, str(directorio), batch_size=5)

    # Tabla vacía otra vez para medir sólo la carga de localidades
    await session.execute(CatLocalidad.__table__.delete())
    await session.commit()

    commits = []
    commit_original = session.commit

    async def commit_contado():
        commits.append(1)
        await commit_original()

    monkeypatch.setattr(session, "commit", commit_contado)

    insertadas = await llenar_catalogo_localidades(session, str(directorio), batch_size=5)

    assert insertadas == 12
    assert len(commits) == 3  # 5 + 5 + 2


@pytest.mark.anyio
async def test_lote_por_defecto_es_el_configurado(session, catalogos_queretaro, monkeypatch):
    llamadas = []
    insertar_original = carga_catalogos._insertar

    async def insertar_espia(db, modelo, filas, batch_size=None):
        llamadas.append((modelo.__tablename__, batch_size))
        return await insertar_original(db, modelo, filas, batch_size)

    monkeypatch.setattr(carga_catalogos, "_insertar", insertar_espia)

    await poblar_catalogos(session, str(catalogos_queretaro))

    assert llamadas == [
        ("cat_estados", None),
        ("cat_municipios", None),
        ("cat_codigos_postales", 5000),
        ("cat_localidades", 5000),
    ]


@pytest.mark.anyio
async def test_cp_con_ceros_a_la_izquierda(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_codigos_postales"] = [("01000", 22, 9)]
    datos["cat_localidades"] = [(1, "San Ángel", "01000", 22, 9)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    await poblar_catalogos(session, str(directorio))

    assert (await session.get(CatCodigoPostal, 1000)) is not None


@pytest.mark.anyio
async def test_fila_mal_formada_aborta_y_no_inserta(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_municipios"] = [(22, "Querétaro", 9), ("veintitrés", "Corregidora", 9)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    with pytest.raises(CargaCatalogoError, match="línea 3"):
        await poblar_catalogos(session, str(directorio))

    stats = await estadisticas_catalogos(session)
    assert stats["cat_estados"] == 1
    assert stats["cat_municipios"] == 0


@pytest.mark.anyio
async def test_archivo_faltante_es_fatal(session, tmp_path):
    directorio = tmp_path / "vacio"
    directorio.mkdir()

    with pytest.raises(CargaCatalogoError, match="cat_estados"):
        await poblar_catalogos(session, str(directorio))


@pytest.mark.parametrize("contenido", ["", "foo,bar\n", "id_localidad,localidad,cp,id_municipio,id_estado\n"])
@pytest.mark.anyio
async def test_catalogo_de_localidades_sin_registros_es_fatal(session, catalogos_queretaro, contenido):
    (catalogos_queretaro / "cat_localidades.csv").write_text(contenido, encoding="utf-8")

    with pytest.raises(CargaCatalogoError, match="cat_localidades.csv"):
        await poblar_catalogos(session, str(catalogos_queretaro))

    stats = await estadisticas_catalogos(session)
    assert stats["cat_codigos_postales"] == 1
    assert stats["cat_localidades"] == 0


@pytest.mark.anyio
async def test_llave_foranea_inexistente_es_error_de_carga(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_municipios"] = [(22, "Querétaro", 99)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    with pytest.raises(CargaCatalogoError, match="cat_municipios"):
        await poblar_catalogos(session, str(directorio))


@pytest.mark.anyio
async def test_cp_con_estado_distinto_al_del_municipio(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_estados"] = [(9, "Querétaro"), (11, "Guanajuato")]
    datos["cat_codigos_postales"] = [(76000, 22, 11)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    with pytest.raises(CargaCatalogoError, match="CP 76000"):
        await poblar_catalogos(session, str(directorio))


@pytest.mark.anyio
async def test_validacion_de_consistencia_desactivable(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_estados"] = [(9, "Querétaro"), (11, "Guanajuato")]
    datos["cat_codigos_postales"] = [(76000, 22, 11)]
    datos["cat_localidades"] = [(1, "Centro", 76000, 22, 11)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    resumen = await poblar_catalogos(session, str(directorio), validar=False)

    assert resumen["cat_codigos_postales"] == 1
    assert resumen["cat_localidades"] == 1


@pytest.mark.anyio
async def test_localidad_inconsistente_con_su_cp(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_municipios"] = [(22, "Querétaro", 9), (6, "Corregidora", 9)]
    datos["cat_localidades"] = [(1, "Centro", 76000, 6, 9)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    with pytest.raises(CargaCatalogoError, match="Localidad 1"):
        await poblar_catalogos(session, str(directorio))

    assert (await estadisticas_catalogos(session))["cat_localidades"] == 0


@pytest.mark.anyio
async def test_localidad_con_cp_inexistente(session, tmp_path):
    datos = dict(QUERETARO)
    datos["cat_localidades"] = [(1, "Centro", 76001, 22, 9)]
    directorio = escribir_catalogos(tmp_path / "catalogos", datos)

    with pytest.raises(CargaCatalogoError, match="el CP 76001 no existe"):
        await poblar_catalogos(session, str(directorio))


@pytest.mark.anyio
async def test_integridad_referencial_tras_la_carga(session, tmp_path):
    datos = {
        "cat_estados": [(9, "Querétaro"), (15, "México")],
        "cat_municipios": [(22, "Querétaro", 9), (57, "Naucalpan de Juárez", 15)],
        "cat_codigos_postales": [(76000, 22, 9), (53000, 57, 15)],
        "cat_localidades": [
            (1, "Centro", 76000, 22, 9),
            (2, "Naucalpan Centro", 53000, 57, 15),
            (3, "San Bartolo Naucalpan", 53000, 57, 15),
        ],
    }
    await poblar_catalogos(session, str(escribir_catalogos(tmp_path / "catalogos", datos)))

    estados = set((await session.execute(select(CatEstado.id))).scalars().all())
    municipios = {
        m.id: m.id_estado for m in (await session.execute(select(CatMunicipio))).scalars().all()
    }
    cps = {
        c.codigo_postal: c for c in (await session.execute(select(CatCodigoPostal))).scalars().all()
    }
    localidades = (await session.execute(select(CatLocalidad))).scalars().all()

    assert all(id_estado in estados for id_estado in municipios.values())
    for cp in cps.values():
        assert municipios[cp.id_municipio] == cp.id_estado
    for localidad in localidades:
        cp = cps[localidad.codigo_postal]
        assert (localidad.id_municipio, localidad.id_estado) == (cp.id_municipio, cp.id_estado)
